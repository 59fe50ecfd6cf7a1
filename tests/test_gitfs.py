"""Tests for fsnap.gitfs."""

import pytest
from dulwich.objects import Tree
from dulwich.repo import Repo

from fsnap import dirsnap, filesnap, FileType, GitTreeFileSystem
from fsnap.dirsnap import Dirs
from fsnap.filesnap import Files


@pytest.fixture
def gfs(git_repo):
    path, _ = git_repo
    with GitTreeFileSystem.open(path) as fs:
        yield fs


class TestOpen:
    def test_head(self, git_repo):
        path, repo = git_repo
        with GitTreeFileSystem.open(path) as fs:
            assert fs.tree_hash == repo[repo.refs[b"HEAD"]].tree.decode()

    def test_branch_name(self, git_repo):
        path, _ = git_repo
        with GitTreeFileSystem.open(path, "main") as fs:
            assert fs.stat("some").is_dir

    def test_full_ref_name(self, git_repo):
        path, _ = git_repo
        with GitTreeFileSystem.open(path, "refs/heads/main") as fs:
            assert fs.stat("emptyFile").file_type is FileType.FILE

    def test_annotated_tag(self, git_repo, git_commit, git_tag):
        path, repo = git_repo
        old = repo.refs[b"refs/heads/main"]
        git_commit({"new": b"n"})
        git_tag("v1", old)
        with GitTreeFileSystem.open(path, "v1") as fs:
            assert filesnap.read_fs(fs, "")["some/sub/file"] == b"foobar"
        with GitTreeFileSystem.open(path, "main") as fs:
            assert filesnap.read_fs(fs, "") == Files({"new": b"n"})

    def test_commit_sha(self, git_repo):
        path, repo = git_repo
        sha = repo.refs[b"refs/heads/main"]
        with GitTreeFileSystem.open(path, sha.decode()) as fs:
            assert fs.stat("some/sub").is_dir

    def test_unknown_ref(self, git_repo):
        path, _ = git_repo
        with pytest.raises(KeyError):
            GitTreeFileSystem.open(path, "nope")

    def test_repr(self, gfs):
        assert repr(gfs) == f"GitTreeFileSystem(tree={gfs.tree_hash[:7]})"


class TestRead:
    def test_dirsnap(self, gfs):
        assert dirsnap.read_fs(gfs, "", -1) == Dirs({
            "emptyDir": {},
            "emptyFile": None,
            "some": {
                "sub": {"dir": {}, "file": None},
                "nested.txt": None,
            },
        })

    def test_dirsnap_depth_zero(self, gfs):
        assert dirsnap.read_fs(gfs, ".", 0) == Dirs({
            "emptyDir": {},
            "emptyFile": None,
            "some": {},
        })

    def test_filesnap(self, gfs):
        assert filesnap.read_fs(gfs, "/", -1) == Files({
            "emptyFile": b"",
            "some/nested.txt": b"File Contents",
            "some/sub/file": b"foobar",
        })

    def test_filesnap_subdir(self, gfs):
        assert filesnap.read_fs(gfs, "some", 0) == Files({"nested.txt": b"File Contents"})

    def test_missing_root(self, gfs):
        with pytest.raises(FileNotFoundError):
            dirsnap.read_fs(gfs, "missing", -1)

    def test_read_directory(self, gfs):
        with pytest.raises(IsADirectoryError):
            gfs.read_bytes("some")

    def test_list_file(self, gfs):
        with pytest.raises(NotADirectoryError):
            gfs.listdir("emptyFile")

    def test_walk_through_file(self, gfs):
        with pytest.raises(NotADirectoryError):
            gfs.stat("emptyFile/x")

    def test_stat_size(self, gfs):
        assert gfs.stat("some/sub/file").size == 6

    def test_submodule_listed_as_file(self, tmp_path):
        repo = Repo.init_bare(str(tmp_path / "sub.git"), mkdir=True)
        tree = Tree()
        tree.add(b"vendor", 0o160000, b"1" * 40)
        repo.object_store.add_object(tree)
        fs = GitTreeFileSystem(repo, tree.id)
        try:
            assert dirsnap.read_fs(fs, "") == Dirs({"vendor": None})
            with pytest.raises(FileNotFoundError):
                fs.read_bytes("vendor")
        finally:
            fs.close()


class TestReadOnly:
    @pytest.mark.parametrize("op", ["mkdir", "makedirs"])
    def test_dir_ops(self, gfs, op):
        with pytest.raises(PermissionError):
            getattr(gfs, op)("new")

    def test_write_bytes(self, gfs):
        with pytest.raises(PermissionError):
            gfs.write_bytes("new", b"")

    def test_snapshot_write_fails(self, gfs):
        with pytest.raises(PermissionError):
            Files({"a": b""}).write("", fs=gfs)
        with pytest.raises(PermissionError):
            Dirs({"a": None}).write("", fs=gfs)


def test_copy_tree_to_disk(gfs, tmp_path):
    """A snapshot read from git materializes onto disk unchanged."""
    files = filesnap.read_fs(gfs, "")
    tree = dirsnap.read_fs(gfs, "")
    out = tmp_path / "out"
    out.mkdir()
    tree.write(out)
    files.write(out)
    assert filesnap.read(out) == files
    assert dirsnap.read(out) == tree
