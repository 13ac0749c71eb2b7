import json
import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from rules.rule_store import RuleStore


def write_file(base, relpath, content):
    """Write `content` (str, or dict/list dumped as JSON) to base/relpath."""
    path = os.path.join(str(base), *relpath.split("/"))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    if not isinstance(content, str):
        content = json.dumps(content)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


@pytest.fixture
def project(tmp_path):
    """Empty project root; use write_file(project, 'api/composer.json', {...})."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def make_store(tmp_path):
    """Build a RuleStore from a {rule_id: content} mapping."""
    def _make(rules):
        root = tmp_path / "rules_store"
        root.mkdir(exist_ok=True)
        for rule_id, content in rules.items():
            write_file(root, f"{rule_id}.md", content)
        return RuleStore(str(root))
    return _make
