import pytest

from conftest import FakeEmbeddingService, FakeMemoryEngine
from file_indexer.agents import FileAgent
from file_indexer.embedding_services.content_cache import ContentCache
from file_indexer.embedding_services.document_indexer import DocumentIndexer
from file_indexer.tools import GlobTool, ToolRegistry, ViewTool


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("# Guide\n\nIndexing guide for indexing and indexing files.", encoding="utf-8")
    (tmp_path / "main.py").write_text("import os\n\ndef main():\n    pass\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def registry(workspace, config):
    registry = ToolRegistry()
    registry.register_tool(GlobTool(base_dir=str(workspace), config=config))
    registry.register_tool(ViewTool(config=config))
    return registry


def test_read_file_uses_cache_until_ttl(registry, workspace, config):
    clock = FakeClock()
    agent = FileAgent(registry, content_cache=ContentCache(ttl_seconds=60, clock=clock), config=config)
    path = str(workspace / "main.py")

    first = agent.execute_task({'operation': 'read', 'path': path})
    second = agent.execute_task({'operation': 'read', 'path': path})
    clock.now = 61
    third = agent.execute_task({'operation': 'read', 'path': path})

    assert first['success'] is True
    assert first['data']['content'].startswith("import os")
    assert first['data']['from_cache'] is False
    assert second['data']['from_cache'] is True
    assert third['data']['from_cache'] is False


def test_read_missing_file_is_structured_failure(registry, workspace, config):
    agent = FileAgent(registry, config=config)

    result = agent.execute_task({'operation': 'read', 'path': str(workspace / "missing.txt")})

    assert result['success'] is False
    assert result['metadata'] == {'error_type': 'FileReadError', 'operation': 'read'}
    assert 'timestamp' in result


def test_search_files(registry, config):
    agent = FileAgent(registry, config=config)

    result = agent.execute_task({'operation': 'search', 'pattern': '**/*.md'})

    assert result['success'] is True
    assert result['data']['count'] == 1
    assert result['data']['matches'][0].endswith("guide.md")


def test_search_without_pattern_fails(registry, config):
    result = FileAgent(registry, config=config).execute_task({'operation': 'search'})

    assert result['success'] is False
    assert result['metadata']['error_type'] == 'InvalidInputError'


@pytest.mark.parametrize("task, error_type", [
    ({'operation': 'list', 'path': '.'}, 'InvalidInputError'),
    ({}, 'InvalidInputError'),
    ("read", 'InvalidInputError'),
])
def test_invalid_tasks(registry, config, task, error_type):
    result = FileAgent(registry, config=config).execute_task(task)

    assert result['success'] is False
    assert result['metadata']['error_type'] == error_type


def test_analyze_file_stores_analysis(registry, workspace, config):
    memory = FakeMemoryEngine()
    agent = FileAgent(registry, embedding_service=FakeEmbeddingService(), memory_engine=memory, config=config)
    path = str(workspace / "docs" / "guide.md")

    result = agent.execute_task({'operation': 'analyze', 'path': path})

    analysis = result['data']
    assert result['success'] is True
    assert analysis['file_type'] == 'Markdown'
    assert analysis['has_embedding'] is True
    assert analysis['line_count'] == 3
    assert analysis['top_keywords'][0] == {'word': 'indexing', 'count': 3}
    assert memory.memories[f"file_analysis:{path}"][0] == analysis


def test_analyze_survives_embedding_failure(registry, workspace, config):
    content = (workspace / "main.py").read_text(encoding="utf-8")
    agent = FileAgent(registry, embedding_service=FakeEmbeddingService(fail_on={content}), config=config)

    result = agent.analyze_file(str(workspace / "main.py"))

    assert result['success'] is True
    assert result['data']['has_embedding'] is False
    assert result['data']['file_type'] == 'Python'


def test_index_delegates_to_indexer(registry, workspace, config, vector_store):
    indexer = DocumentIndexer(
        embedding_service=FakeEmbeddingService(),
        vector_store=vector_store,
        path_resolver=registry.get_tool('glob'),
        file_reader=registry.get_tool('view'),
        config=config
    )
    agent = FileAgent(registry, document_indexer=indexer, config=config)

    result = agent.execute_task({'operation': 'index', 'pattern': '**/*'})

    assert result['success'] is True
    assert result['data']['total_files'] == 2
    assert result['data']['processed_files'] == 2
    assert vector_store.count() == 2
    # the agent shares the indexer's cache
    assert agent.content_cache is indexer.content_cache
    assert agent.read_file(str(workspace / "main.py"))['data']['from_cache'] is True


def test_index_without_indexer(registry, config):
    result = FileAgent(registry, config=config).execute_task({'operation': 'index', 'pattern': '*'})

    assert result['success'] is False
    assert result['metadata'] == {'error_type': 'MissingDependencyError', 'operation': 'index'}
