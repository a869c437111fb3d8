"""
File analysis heuristics - keywords, file type and a short summary
"""
import json
import re
from collections import Counter
from pathlib import PurePath
from typing import Dict, List

STOP_WORDS = frozenset({
    'a', 'an', 'the', 'and', 'or', 'but', 'is', 'are', 'was', 'were',
    'this', 'that', 'these', 'those', 'with', 'for', 'from', 'to', 'at',
    'by', 'about', 'as', 'into', 'like', 'through', 'over', 'after', 'before',
    'between', 'under', 'above', 'below', 'since', 'during', 'until', 'unless',
    'although', 'how', 'what', 'when', 'where', 'who', 'which', 'why',
    'can', 'could', 'should', 'would', 'may', 'might', 'must', 'shall', 'will'
})

EXTENSION_TYPES = {
    'js': 'JavaScript',
    'jsx': 'React JSX',
    'ts': 'TypeScript',
    'tsx': 'React TSX',
    'html': 'HTML',
    'css': 'CSS',
    'scss': 'SCSS',
    'json': 'JSON',
    'md': 'Markdown',
    'py': 'Python',
    'java': 'Java',
    'c': 'C',
    'cpp': 'C++',
    'h': 'C/C++ Header',
    'rb': 'Ruby',
    'go': 'Go',
    'php': 'PHP',
    'sql': 'SQL',
    'sh': 'Shell Script',
    'bat': 'Batch Script',
    'ps1': 'PowerShell Script',
    'yml': 'YAML',
    'yaml': 'YAML',
    'xml': 'XML',
    'csv': 'CSV',
    'txt': 'Plain Text',
}

IMPORT_PREFIXES = ('import ', 'from ', 'require(', 'using ', '#include ')
DEFINITION_PATTERN = re.compile(r'^(def |async def |class |function |(public|private|protected|export)\s+(class|function|interface))')
MARKDOWN_PATTERN = re.compile(r'^(#|>|\s*[-*+]\s|\s*\d+\.\s)|\]\(|\*\*.*\*\*')


def extract_keywords(text: str, limit: int = 10) -> List[Dict[str, object]]:
    """
    Most frequent words in text, ignoring stop words, numbers and words of two letters or less

    Returns:
        List of {'word', 'count'}, most frequent first
    """
    words = re.sub(r'[^\w\s]', ' ', text.lower()).split()
    counts = Counter(
        word for word in words
        if len(word) > 2 and word not in STOP_WORDS and not word.isdigit()
    )
    return [{'word': word, 'count': count} for word, count in counts.most_common(limit)]


def determine_file_type(path: str, content: str) -> str:
    """Guess a file type from its extension, then from its content"""
    extension = PurePath(path).suffix.lower().lstrip('.')
    if extension in EXTENSION_TYPES:
        return EXTENSION_TYPES[extension]

    stripped = content.strip()
    if stripped.startswith('<?xml'):
        return 'XML'
    if stripped.lower().startswith('<!doctype html') or re.search(r'<html[\s>]', content, re.IGNORECASE):
        return 'HTML'
    if stripped[:1] in ('{', '[') and stripped[-1:] in ('}', ']'):
        try:
            json.loads(stripped)
            return 'JSON'
        except ValueError:
            pass

    return 'Plain Text'


def _truncate(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length - 3] + '...'
    return text


def _summarize_code(lines: List[str], max_length: int) -> str:
    imports = []
    definitions = []
    comment_blocks = []
    comment_block = None

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        if comment_block is not None:
            comment_block.append(line)
            if '*/' in line or line.endswith('"""'):
                comment_blocks.append('\n'.join(comment_block))
                comment_block = None
            continue

        if line.startswith('/*') or (line.startswith('"""') and not (len(line) > 3 and line.endswith('"""'))):
            comment_block = [line]
            continue

        if line.startswith(IMPORT_PREFIXES):
            imports.append(line)
        elif DEFINITION_PATTERN.match(line):
            definitions.append(line)

    parts = []
    if comment_blocks:
        parts.append(comment_blocks[0])
    if imports:
        parts.append('\n'.join(imports[:5]) + ('\n# ... more imports' if len(imports) > 5 else ''))
    if definitions:
        parts.append('\n'.join(definitions[:10]) + ('\n# ... more definitions' if len(definitions) > 10 else ''))

    if not imports and not definitions:
        return ''
    return _truncate('\n\n'.join(parts), max_length)


def _summarize_markdown(lines: List[str], max_length: int) -> str:
    if not any(MARKDOWN_PATTERN.search(line) for line in lines):
        return ''

    headings = [line.strip() for line in lines if line.strip().startswith('#')]

    paragraphs = []
    current = []
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith('#'):
            current.append(stripped)
        elif current:
            paragraphs.append(' '.join(current))
            current = []
        if len(paragraphs) >= 2:
            break
    if current and len(paragraphs) < 2:
        paragraphs.append(' '.join(current))

    summary = ''
    if headings:
        summary += '## Table of Contents\n\n' + '\n'.join(headings[:8])
        if len(headings) > 8:
            summary += '\n...more headings'
        summary += '\n\n'
    if paragraphs:
        summary += '## Content Preview\n\n' + '\n\n'.join(paragraphs)

    return _truncate(summary, max_length)


def _summarize_generic(lines: List[str], max_length: int) -> str:
    non_empty = [line for line in lines if line.strip()]
    if not non_empty:
        return 'Empty file'

    preview = '\n'.join(non_empty[:10])
    if len(preview) > max_length:
        return _truncate(preview, max_length)
    if len(non_empty) > 10:
        preview += '\n...'
    return preview


def summarize_content(content: str, max_length: int = 500) -> str:
    """Short summary of file content; content within max_length is returned as is"""
    if not content:
        return 'No content available'
    if len(content) <= max_length:
        return content

    lines = content.split('\n')
    for strategy in (_summarize_code, _summarize_markdown, _summarize_generic):
        summary = strategy(lines, max_length)
        if summary:
            return summary

    return _truncate(content, max_length)
