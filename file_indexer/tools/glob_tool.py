"""
Glob Tool - Pattern-based file discovery on the local filesystem
"""
import re
import time
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..embedding_services.interfaces import PathResolver
from ..errors import InvalidInputError, PatternResolutionError
from ..utils.logger import setup_logger
from ..utils.load_config import load_config

logger = setup_logger('glob_tool', 'tools.log')

# Innermost {...} group
BRACE_PATTERN = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """
    Expand {a,b,c} alternatives into separate glob patterns

    Nested groups are expanded innermost first; duplicates are dropped and
    the order of first appearance is kept.
    """
    match = BRACE_PATTERN.search(pattern)
    if match is None:
        return [pattern]

    expanded = []
    for option in match.group(1).split(","):
        candidate = pattern[:match.start()] + option.strip() + pattern[match.end():]
        for result in expand_braces(candidate):
            if result not in expanded:
                expanded.append(result)
    return expanded


class GlobTool(PathResolver):
    """Find files matching a glob pattern"""

    name = 'glob'
    description = 'Find files matching a pattern'

    def __init__(
        self,
        base_dir: Optional[str] = None,
        default_ignore_patterns: Optional[List[str]] = None,
        max_results: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize glob tool

        Args:
            base_dir: Directory patterns are resolved against
            default_ignore_patterns: Patterns always excluded (e.g. '.git/**')
            max_results: Maximum number of paths returned
            config: Configuration dict (if None, loads from config.yaml)
        """
        # Load config if not provided
        if config is None:
            config = load_config()

        glob_config = config.get('tools', {}).get('glob', {})

        self.base_dir = base_dir or glob_config.get('base_dir', '.')
        if default_ignore_patterns is None:
            default_ignore_patterns = glob_config.get('default_ignore_patterns', [])
        self.default_ignore_patterns = list(default_ignore_patterns)
        self.max_results = max_results or glob_config.get('max_results', 1000)

    def get_name(self) -> str:
        return self.name

    def get_description(self) -> str:
        return self.description

    def resolve(
        self,
        pattern: str,
        base_dir: Optional[str] = None,
        ignore_patterns: Optional[List[str]] = None,
        max_results: Optional[int] = None
    ) -> List[str]:
        """
        Resolve pattern to a sorted list of file paths

        Args:
            pattern: Glob pattern relative to base_dir ('**' matches any depth)
            base_dir: Overrides the configured base directory
            ignore_patterns: Extra patterns to exclude, matched against the relative path
            max_results: Overrides the configured result cap

        Returns:
            Matching file paths
        """
        return self._find_matches(pattern, base_dir, ignore_patterns, max_results)[0]

    def execute(self, pattern: str, **options) -> Dict[str, Any]:
        """
        Run the tool and wrap the outcome in a result payload

        Returns:
            {'success': True, 'data': [paths], 'metadata': {...}} or
            {'success': False, 'error': message, 'metadata': {...}}
        """
        base_dir = options.get('base_dir') or self.base_dir
        try:
            matches, truncated = self._find_matches(
                pattern,
                base_dir,
                options.get('ignore_patterns'),
                options.get('max_results')
            )
            return {
                'success': True,
                'data': matches,
                'metadata': {
                    'pattern': pattern,
                    'base_dir': base_dir,
                    'count': len(matches),
                    'truncated': truncated,
                    'timestamp': time.time()
                }
            }
        except Exception as e:
            logger.error(f"GlobTool error for {pattern}: {str(e)}")
            return {
                'success': False,
                'error': str(e),
                'metadata': {
                    'pattern': pattern,
                    'timestamp': time.time()
                }
            }

    def _find_matches(self, pattern, base_dir, ignore_patterns, max_results):
        if not isinstance(pattern, str) or not pattern:
            raise InvalidInputError("Invalid pattern: must be a non-empty string")

        root = Path(base_dir or self.base_dir)
        if not root.is_dir():
            raise PatternResolutionError(f"Base directory does not exist: {root}")

        ignores = [
            expanded
            for ignore in self.default_ignore_patterns + list(ignore_patterns or [])
            for expanded in expand_braces(ignore)
        ]
        limit = max_results or self.max_results

        logger.debug(f"Executing glob pattern: {pattern} from {root}")

        try:
            candidates = set()
            for expanded in expand_braces(pattern):
                candidates.update(root.glob(expanded))
            candidates = sorted(candidates)
        except (ValueError, OSError, NotImplementedError) as e:
            raise PatternResolutionError(f"Failed to match files: {str(e)}") from e

        matches = []
        for candidate in candidates:
            if not candidate.is_file():
                continue
            relative_path = candidate.relative_to(root).as_posix()
            if any(fnmatch(relative_path, ignore) for ignore in ignores):
                continue
            matches.append(str(candidate))

        return matches[:limit], len(matches) > limit
