import pytest

from file_indexer.agents.file_analysis import determine_file_type, extract_keywords, summarize_content


def test_extract_keywords_counts_and_filters():
    text = "The parser parses tokens. Tokens feed the parser; the parser emits 42 nodes."

    keywords = extract_keywords(text, limit=3)

    assert keywords[0] == {'word': 'parser', 'count': 3}
    assert keywords[1] == {'word': 'tokens', 'count': 2}
    words = [keyword['word'] for keyword in extract_keywords(text)]
    assert 'the' not in words
    assert '42' not in words


def test_extract_keywords_empty():
    assert extract_keywords("") == []


@pytest.mark.parametrize("path, content, expected", [
    ("app.py", "", "Python"),
    ("README.MD", "", "Markdown"),
    ("config.yaml", "", "YAML"),
    ("data", '<?xml version="1.0"?><root/>', "XML"),
    ("page", "<!DOCTYPE html><html></html>", "HTML"),
    ("payload", '{"key": [1, 2]}', "JSON"),
    ("broken", '{"key": ', "Plain Text"),
    ("LICENSE", "Permission is hereby granted", "Plain Text"),
])
def test_determine_file_type(path, content, expected):
    assert determine_file_type(path, content) == expected


def test_summarize_short_content_is_unchanged():
    assert summarize_content("tiny file") == "tiny file"
    assert summarize_content("") == "No content available"


def test_summarize_code_lists_imports_and_definitions():
    content = "\n".join(
        ["import os", "from typing import List", ""]
        + [f"def function_{i}():\n    return {i}\n" for i in range(40)]
    )

    summary = summarize_content(content, max_length=500)

    assert summary.startswith("import os\nfrom typing import List")
    assert "def function_0():" in summary
    assert "# ... more definitions" in summary
    assert len(summary) <= 500


def test_summarize_markdown_builds_table_of_contents():
    content = "# Guide\n\nIntro paragraph.\n\n## Install\n\n" + "Run the installer. " * 40

    summary = summarize_content(content, max_length=300)

    assert summary.startswith("## Table of Contents\n\n# Guide\n## Install")
    assert "## Content Preview" in summary
    assert len(summary) <= 300


def test_summarize_generic_previews_first_lines():
    content = "\n".join(f"row {i} " + "x" * 30 for i in range(30))

    summary = summarize_content(content, max_length=1000)

    assert summary.startswith("row 0")
    assert summary.endswith("\n...")
    assert summary.count("\n") == 10
