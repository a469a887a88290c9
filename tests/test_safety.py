"""Tests for the safety policy."""

import os

import pytest

from diskcleaner.safety import SafetyPolicy


class TestHomeScope:
    def test_path_under_home(self, home, policy):
        assert policy.is_in_home_scope(home / "Library" / "Caches" / "x")

    def test_home_itself_not_in_scope(self, home, policy):
        assert not policy.is_in_home_scope(home)

    def test_outside_home(self, tmp_path, policy):
        assert not policy.is_in_home_scope(tmp_path / "elsewhere")
        assert not policy.is_in_home_scope("/etc/passwd")

    def test_sibling_with_common_prefix(self, home, policy):
        assert not policy.is_in_home_scope(str(home) + "-other/file")

    def test_traversal_segments_resolved(self, home, policy):
        assert not policy.is_in_home_scope(f"{home}/Library/../../outside")
        assert policy.is_in_home_scope(f"{home}/Library/../Downloads/x")

    def test_relative_path_never_in_scope(self, policy):
        assert not policy.is_in_home_scope("Library/Caches/x")
        assert not policy.is_in_home_scope("")

    def test_symlink_escaping_home(self, home, tmp_path, policy):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret").write_text("x")
        (home / "escape").symlink_to(outside)

        assert not policy.is_in_home_scope(home / "escape" / "secret")
        assert policy.is_in_home_scope(home / "escape" / "secret", resolve=False)


class TestDenyList:
    @pytest.mark.parametrize(
        "relative",
        [
            "Documents",
            "Documents/report.pdf",
            "Desktop/screenshot.png",
            "Pictures/holiday.jpg",
            "Library/Mail/V10/inbox.mbox",
            "Library/Mobile Documents/com~apple~CloudDocs/notes.txt",
            "Movies/Photos Library.photoslibrary/originals/a.heic",
            "Library/Caches/Old.photoslibrary",
        ],
    )
    def test_protected_subtrees(self, home, policy, relative):
        assert policy.is_deny_listed(home / relative)

    @pytest.mark.parametrize(
        "relative",
        [
            "Documents2/file",
            "MyDocuments/file",
            "Library/Caches/Documents-cache/file",
            "Library/Mailbox/file",
            "Downloads/Desktop.zip",
        ],
    )
    def test_segment_boundary(self, home, policy, relative):
        assert not policy.is_deny_listed(home / relative)

    def test_case_insensitive(self, home, policy):
        assert policy.is_deny_listed(home / "documents" / "x")
        assert policy.is_deny_listed(home / "library" / "mail" / "x")

    def test_traversal_into_protected_subtree(self, home, policy):
        assert policy.is_deny_listed(f"{home}/Library/Caches/../../Documents/x")

    def test_outside_home_not_deny_listed(self, tmp_path, policy):
        assert not policy.is_deny_listed(tmp_path / "Documents" / "x")


class TestContainsDenyListed:
    def test_parent_of_protected_subtree(self, home, policy):
        assert policy.contains_deny_listed(home / "Library")

    def test_parent_matched_case_insensitively(self, home, policy):
        assert policy.contains_deny_listed(home / "library")

    def test_photo_library_inside_directory(self, home, policy):
        (home / "Movies" / "Old.PhotosLibrary" / "originals").mkdir(parents=True)
        assert policy.contains_deny_listed(home / "Movies")

    def test_plain_cache_directory(self, home, policy, caches):
        (caches / "app" / "data").mkdir(parents=True)
        assert not policy.contains_deny_listed(caches / "app")

    def test_file(self, home, policy, caches):
        (caches / "a.bin").write_text("x")
        assert not policy.contains_deny_listed(caches / "a.bin")

    def test_linked_directory_not_followed(self, home, policy, caches):
        (home / "Movies" / "Old.photoslibrary").mkdir(parents=True)
        (caches / "movies-link").symlink_to(home / "Movies")
        assert not policy.contains_deny_listed(caches)


class TestSymlinks:
    def test_parent_segment_after_link(self, home, policy):
        (home / "b" / "c").mkdir(parents=True)
        (home / "b" / "x.bin").write_text("x")
        (home / "a").mkdir()
        (home / "a" / "link").symlink_to(home / "b" / "c")

        assert policy.passes_through_symlink(f"{home}/a/link/../x.bin")
        assert not policy.evaluate(f"{home}/a/link/../x.bin").allowed

    def test_parent_segment_without_link(self, home, policy):
        (home / "a" / "b").mkdir(parents=True)
        (home / "a" / "x.bin").write_text("x")
        assert not policy.passes_through_symlink(f"{home}/a/b/../x.bin")

    def test_link_itself(self, home, policy):
        target = home / "real.txt"
        target.write_text("x")
        (home / "link.txt").symlink_to(target)
        assert policy.passes_through_symlink(home / "link.txt")

    def test_link_directory_in_path(self, home, policy):
        real = home / "real"
        real.mkdir()
        (real / "file").write_text("x")
        (home / "alias").symlink_to(real)
        assert policy.passes_through_symlink(home / "alias" / "file")

    def test_plain_path(self, home, policy):
        (home / "dir").mkdir()
        (home / "dir" / "file").write_text("x")
        assert not policy.passes_through_symlink(home / "dir" / "file")

    def test_missing_path(self, home, policy):
        assert not policy.passes_through_symlink(home / "nope" / "file")

    def test_linked_home_root_allowed(self, tmp_path):
        real_home = tmp_path / "real-home"
        (real_home / "Library").mkdir(parents=True)
        (real_home / "Library" / "file").write_text("x")
        linked_home = tmp_path / "linked-home"
        linked_home.symlink_to(real_home)

        policy = SafetyPolicy(linked_home)
        assert policy.allows(linked_home / "Library" / "file")
        assert policy.allows(real_home / "Library" / "file")


class TestEvaluate:
    def test_allowed_path(self, home, policy):
        decision = policy.evaluate(home / "Library" / "Caches" / "x")
        assert decision.in_scope
        assert not decision.deny_listed
        assert decision.allowed

    def test_deny_listed_path(self, home, policy):
        decision = policy.evaluate(home / "Documents" / "x")
        assert decision.in_scope
        assert decision.deny_listed
        assert not decision.allowed

    def test_out_of_scope_path(self, policy):
        decision = policy.evaluate("/etc/hosts")
        assert not decision.in_scope
        assert not decision.allowed

    def test_symlinked_path(self, home, policy):
        (home / "real").mkdir()
        (home / "link").symlink_to(home / "real")
        decision = policy.evaluate(home / "link")
        assert decision.via_symlink
        assert not decision.allowed

    def test_home_property(self, home, policy):
        assert policy.home == home
        assert os.path.isabs(policy.home_real)
