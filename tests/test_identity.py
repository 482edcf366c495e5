import contextlib
import grp
import io
import pwd
import unittest
from unittest import mock

from PhantomScan.core.errors import InvalidGroupError, InvalidUserError, TooManyGroupsError
from PhantomScan.core.identity import Identity, describe_identity, resolve_identity
from PhantomScan.core.utils import parse_number


def passwd_entry(name, uid, gid):
    return pwd.struct_passwd((name, "x", uid, gid, "", f"/home/{name}", "/bin/sh"))


def group_entry(name, gid):
    return grp.struct_group((name, "x", gid, []))


USERS = [passwd_entry("alice", 1000, 1000), passwd_entry("root", 0, 0)]
GROUPS = [group_entry("alice", 1000), group_entry("sudo", 27), group_entry("wheel", 10), group_entry("root", 0)]


def _lookup(entries, attr):
    def lookup(key):
        for entry in entries:
            if getattr(entry, attr) == key:
                return entry
        raise KeyError(key)

    return lookup


class FakeDatabases(unittest.TestCase):
    """Swap the passwd / group databases and the caller's ids for fixtures."""

    grouplist = {"alice": [1000, 27]}

    def setUp(self) -> None:
        patches = [
            mock.patch("pwd.getpwnam", side_effect=_lookup(USERS, "pw_name")),
            mock.patch("pwd.getpwuid", side_effect=_lookup(USERS, "pw_uid")),
            mock.patch("grp.getgrnam", side_effect=_lookup(GROUPS, "gr_name")),
            mock.patch("grp.getgrgid", side_effect=_lookup(GROUPS, "gr_gid")),
            mock.patch("os.getgrouplist", side_effect=lambda name, gid: list(self.grouplist.get(name, [gid]))),
            mock.patch("os.getuid", return_value=1000),
            mock.patch("os.getgid", return_value=1000),
            mock.patch("os.getgroups", return_value=[27, 100]),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def resolve(self, *args, **kwargs):
        kwargs.setdefault("announce", False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            identity = resolve_identity(*args, **kwargs)
        return identity, stderr.getvalue()


class TestResolveCaller(FakeDatabases):
    def test_inherits_caller_groups_plus_primary(self) -> None:
        identity, warnings = self.resolve()
        self.assertEqual(identity.uid, 1000)
        self.assertEqual(identity.name, "alice")
        self.assertEqual(identity.groups, (27, 100, 1000))
        self.assertEqual(warnings, "")

    def test_caller_without_passwd_entry(self) -> None:
        with mock.patch("os.getuid", return_value=31337), mock.patch("os.getgid", return_value=31337):
            identity, warnings = self.resolve()
        self.assertEqual(identity.uid, 31337)
        self.assertIsNone(identity.name)
        self.assertIn(31337, identity.groups)
        self.assertIn("Unable to find uid 31337", warnings)


class TestResolveUser(FakeDatabases):
    def test_named_user_takes_its_own_groups(self) -> None:
        identity, _ = self.resolve("alice")
        self.assertEqual(identity, Identity(uid=1000, groups=(1000, 27), name="alice"))
        self.assertNotIn(100, identity.groups)

    def test_primary_group_added_when_grouplist_omits_it(self) -> None:
        self.grouplist = {"alice": [27]}
        identity, _ = self.resolve("alice")
        self.assertIn(1000, identity.groups)
        self.assertIn(27, identity.groups)

    def test_numeric_user_in_any_base(self) -> None:
        for spec in ("1000", "0x3e8", "01750"):
            identity, _ = self.resolve(spec)
            self.assertEqual(identity.uid, 1000, spec)
            self.assertEqual(identity.name, "alice", spec)

    def test_unknown_numeric_uid_runs_without_groups(self) -> None:
        identity, warnings = self.resolve("4242")
        self.assertEqual(identity, Identity(uid=4242, groups=(), name=None))
        self.assertIn("Unable to find uid 4242, trying anyway", warnings)

    def test_unknown_user_name_is_fatal(self) -> None:
        with self.assertRaises(InvalidUserError):
            self.resolve("mallory")

    def test_signed_or_padded_uid_is_fatal(self) -> None:
        ### "-1" must not wrap around to uid 4294967295
        for spec in ("-1", "+1000", " 1000"):
            with self.assertRaises(InvalidUserError):
                self.resolve(spec)

    def test_root_by_name(self) -> None:
        identity, _ = self.resolve("root")
        self.assertEqual(identity.uid, 0)
        self.assertIn(0, identity.groups)


class TestExtraGroups(FakeDatabases):
    def test_names_and_numbers_are_added_once(self) -> None:
        identity, warnings = self.resolve("alice", "wheel,27,0x0a")
        self.assertEqual(identity.groups, (1000, 27, 10))
        self.assertEqual(warnings, "")

    def test_unknown_numeric_gid_warns_and_is_kept(self) -> None:
        identity, warnings = self.resolve("alice", "5000")
        self.assertIn(5000, identity.groups)
        self.assertIn("Unable to find gid 5000", warnings)

    def test_unknown_group_name_is_fatal(self) -> None:
        with self.assertRaises(InvalidGroupError):
            self.resolve("alice", "wheel,nosuchgroup")

    def test_empty_tokens_are_skipped(self) -> None:
        identity, _ = self.resolve("alice", ",wheel,,")
        self.assertEqual(identity.groups, (1000, 27, 10))

    def test_extra_groups_on_bare_uid(self) -> None:
        identity, _ = self.resolve("4242", "sudo")
        self.assertEqual(identity.groups, (27,))

    def test_group_bound_is_enforced(self) -> None:
        with self.assertRaises(TooManyGroupsError) as caught:
            self.resolve("alice", "wheel", max_groups=2)
        self.assertEqual(caught.exception.limit, 2)

    def test_duplicates_do_not_count_against_bound(self) -> None:
        identity, _ = self.resolve("alice", "27,1000", max_groups=2)
        self.assertEqual(len(identity.groups), 2)


class TestAnnounce(FakeDatabases):
    def test_summary_line_is_printed(self) -> None:
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.resolve("alice", "5000", announce=True)
        self.assertEqual(stdout.getvalue(), "[*] uid=1000(alice), groups=1000(alice),27(sudo),5000(?)\n")

    def test_describe_unknown_uid(self) -> None:
        self.assertEqual(describe_identity(Identity(uid=4242)), "uid=4242(?), groups=")


class TestParseNumber(unittest.TestCase):
    def test_bases(self) -> None:
        self.assertEqual(parse_number("42"), 42)
        self.assertEqual(parse_number("0x1F"), 31)
        self.assertEqual(parse_number("017"), 15)
        self.assertEqual(parse_number("0"), 0)

    def test_rejects_junk(self) -> None:
        for text in ("", "08", "-1", "+1", " 1", "1_000", "12abc", "0x", "alice"):
            self.assertIsNone(parse_number(text), text)


if __name__ == "__main__":
    unittest.main()
