"""Shared fixtures for fsnap tests."""

import time

import pytest
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

from fsnap import MemoryFileSystem, OSFileSystem


# ---------------------------------------------------------------------------
# Filesystem backends
# ---------------------------------------------------------------------------

@pytest.fixture(params=["os", "memory"])
def backend(request, tmp_path):
    """Return ``(fs, root)``: an empty directory *root* on backend *fs*.

    Runs each test once against the live filesystem (in ``tmp_path``) and
    once against :class:`MemoryFileSystem`.
    """
    if request.param == "os":
        return OSFileSystem(), str(tmp_path)
    fs = MemoryFileSystem()
    fs.makedirs("/tmp/root")
    return fs, "/tmp/root"


def populate(fs, root, layout):
    """Create *layout* (nested dict; bytes = file, dict = dir) under *root*."""
    for name, value in layout.items():
        path = f"{root}/{name}"
        if isinstance(value, dict):
            fs.makedirs(path)
            populate(fs, path, value)
        else:
            fs.write_bytes(path, value)


SAMPLE_LAYOUT = {
    "emptyDir": {},
    "emptyFile": b"",
    "some": {
        "sub": {
            "dir": {},
            "file": b"foobar",
        },
        "nested.txt": b"File Contents",
    },
}


@pytest.fixture
def sample(backend):
    """Backend populated with :data:`SAMPLE_LAYOUT`."""
    fs, root = backend
    populate(fs, root, SAMPLE_LAYOUT)
    return fs, root


# ---------------------------------------------------------------------------
# Git repositories
# ---------------------------------------------------------------------------

_IDENTITY = b"fsnap <fsnap@localhost>"


def _build_tree(repo, node):
    """Store *node* (nested dict; bytes = blob, dict = tree) and return the tree SHA."""
    tree = Tree()
    for name, value in node.items():
        if isinstance(value, dict):
            tree.add(name.encode(), 0o040000, _build_tree(repo, value))
        else:
            blob = Blob.from_string(value)
            repo.object_store.add_object(blob)
            tree.add(name.encode(), 0o100644, blob.id)
    repo.object_store.add_object(tree)
    return tree.id


def _commit_tree(repo, tree_id, ref=b"refs/heads/main", message=b"snapshot\n"):
    c = Commit()
    c.tree = tree_id
    c.parents = []
    c.author = c.committer = _IDENTITY
    c.author_time = c.commit_time = int(time.time())
    c.author_timezone = c.commit_timezone = 0
    c.message = message
    c.encoding = b"UTF-8"
    repo.object_store.add_object(c)
    repo.refs[ref] = c.id
    return c.id


def _tag_commit(repo, name, commit_id):
    tag = Tag()
    tag.name = name.encode()
    tag.object = (Commit, commit_id)
    tag.tagger = _IDENTITY
    tag.tag_time = int(time.time())
    tag.tag_timezone = 0
    tag.message = b"release\n"
    repo.object_store.add_object(tag)
    repo.refs[b"refs/tags/" + name.encode()] = tag.id
    return tag.id


@pytest.fixture
def git_repo(tmp_path):
    """Bare repository whose ``main`` branch (and HEAD) holds :data:`SAMPLE_LAYOUT`."""
    path = tmp_path / "test.git"
    repo = Repo.init_bare(str(path), mkdir=True)
    _commit_tree(repo, _build_tree(repo, SAMPLE_LAYOUT))
    repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")
    yield path, repo
    repo.close()


@pytest.fixture
def git_commit(git_repo):
    """Return ``commit(layout, ref=b"refs/heads/main")``, committing *layout* to *git_repo*."""
    _, repo = git_repo

    def commit(layout, ref=b"refs/heads/main"):
        return _commit_tree(repo, _build_tree(repo, layout), ref)

    return commit


@pytest.fixture
def git_tag(git_repo):
    """Return ``tag(name, commit_id)``, creating an annotated tag in *git_repo*."""
    _, repo = git_repo

    def tag(name, commit_id):
        return _tag_commit(repo, name, commit_id)

    return tag
