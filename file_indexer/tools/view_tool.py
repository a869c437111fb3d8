"""
View Tool - File content retrieval
"""
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ..embedding_services.interfaces import FileReader
from ..errors import FileReadError, InvalidInputError
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('view_tool', 'tools.log')


class ViewTool(FileReader):
    """View the contents of a file"""

    name = 'view'
    description = 'View the contents of a file'

    def __init__(self, max_size: Optional[int] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize view tool

        Args:
            max_size: Largest file size in bytes that will be read
            config: Configuration dict (if None, loads from config.yaml)
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        view_config = config.get('tools', {}).get('view', {})
        self.max_size = max_size or view_config.get('max_size', 5 * 1024 * 1024)

    def get_name(self) -> str:
        return self.name

    def get_description(self) -> str:
        return self.description

    def read(self, path: str, encoding: str = 'utf-8') -> str:
        """
        Read a text file

        Raises:
            FileReadError: Missing file, oversize file or undecodable content
        """
        if not isinstance(path, str) or not path:
            raise InvalidInputError("Invalid file path: must be a non-empty string")

        file_path = Path(path)
        try:
            size = file_path.stat().st_size
        except OSError as e:
            raise FileReadError(f"Failed to read file {path}: {e.strerror or str(e)}") from e

        if not file_path.is_file():
            raise FileReadError(f"Failed to read file {path}: not a regular file")

        if size > self.max_size:
            raise FileReadError(f"Failed to read file {path}: size {size} exceeds limit {self.max_size}")

        try:
            return file_path.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(f"Failed to read file {path}: {str(e)}") from e

    def execute(self, path: str, **options) -> Dict[str, Any]:
        """
        Run the tool and wrap the outcome in a result payload

        Returns:
            {'success': True, 'data': {'path', 'content', 'metadata'}} or
            {'success': False, 'error': message, 'metadata': {...}}
        """
        encoding = options.get('encoding', 'utf-8')
        logger.debug(f"Viewing file: {path}")
        try:
            content = self.read(path, encoding=encoding)
            return {
                'success': True,
                'data': {
                    'path': path,
                    'content': content,
                    'metadata': {
                        'size': len(content),
                        'encoding': encoding,
                        'timestamp': time.time()
                    }
                }
            }
        except Exception as e:
            logger.error(f"ViewTool error for {path}: {str(e)}")
            return {
                'success': False,
                'error': str(e),
                'metadata': {
                    'path': path,
                    'timestamp': time.time()
                }
            }
