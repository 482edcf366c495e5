import contextlib
import io
import json
import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from PhantomScan.cli import main
from PhantomScan.core.findings import Category, Finding, FindingStore
from PhantomScan.core.identity import Identity
from PhantomScan.core.report import format_finding, render_text, report_to_dict
from PhantomScan.core.snapshot import MetadataSnapshot
from PhantomScan.core.traversal import ScanStats

STRANGER_UID = os.getuid() + 54321


def run_cli(argv):
    stdout, stderr = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        code = main(argv)
    return code, stdout.getvalue(), stderr.getvalue()


class TestReportFormatting(unittest.TestCase):
    def test_fixed_width_line_with_unknown_ids(self) -> None:
        snapshot = MetadataSnapshot(uid=4242, gid=4343, mode=stat.S_IFREG | 0o4755)
        with mock.patch("pwd.getpwuid", side_effect=KeyError(4242)), mock.patch("grp.getgrgid", side_effect=KeyError(4343)):
            line = format_finding(Finding(path="/opt/tool", snapshot=snapshot))
        self.assertEqual(line, "         file 4755 4242 4343 /opt/tool")

    def test_directory_type_is_right_aligned(self) -> None:
        snapshot = MetadataSnapshot(uid=0, gid=0, mode=stat.S_IFDIR | 0o777)
        with mock.patch("pwd.getpwuid", side_effect=KeyError(0)), mock.patch("grp.getgrgid", side_effect=KeyError(0)):
            line = format_finding(Finding(path="/tmp", snapshot=snapshot))
        self.assertEqual(line, "    directory 0777 0 0 /tmp")

    def test_render_text_lists_every_category(self) -> None:
        store = FindingStore()
        store.record(Category.WRITABLE, "/tmp/x", MetadataSnapshot(uid=0, gid=0, mode=stat.S_IFREG | 0o666))
        lines = render_text(store)
        self.assertEqual(lines[0], "[*] Found 0 entries that are set-uid executable")
        self.assertEqual(lines[1], "[*] Found 0 entries that are set-gid executable")
        self.assertEqual(lines[2], "[*] Found 1 entries that are writable")
        self.assertTrue(lines[3].endswith(" /tmp/x"))

    def test_report_dict(self) -> None:
        store = FindingStore(extended=True)
        store.record(Category.SETUID, "/bin/su", MetadataSnapshot(uid=0, gid=0, mode=stat.S_IFREG | 0o4755))
        report = report_to_dict(Identity(uid=4242), store, ScanStats(roots_scanned=1))
        self.assertEqual(report["counts"]["setuid"], 1)
        self.assertEqual(report["counts"]["executable_only"], 0)
        self.assertEqual(report["categories"][0]["findings"][0]["mode"], "4755")
        self.assertEqual(report["identity"]["summary"], "uid=4242(?), groups=")
        self.assertEqual(report["stats"]["roots_scanned"], 1)


class TestMain(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name).resolve()
        self.data = self.root / "data"
        self.data.write_text("x", encoding="utf-8")
        self.data.chmod(0o666)
        self.tool = self.root / "tool"
        self.tool.write_text("x", encoding="utf-8")
        self.tool.chmod(0o4755)

    def test_scan_prints_identity_and_findings(self) -> None:
        code, out, err = run_cli(["--no-color", "-u", str(STRANGER_UID), str(self.root)])
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith(f"[*] uid={STRANGER_UID}(?), groups="))
        self.assertIn(f" {self.data}\n", out)
        self.assertIn(f" {self.tool}\n", out)
        self.assertIn("Unable to find uid", err)
        self.assertIn("[*] Found 1 entries that are set-uid executable", err)
        self.assertIn("[*] Found 1 entries that are writable", err)

    def test_missing_root_still_scans_the_rest(self) -> None:
        missing = self.root / "nope"
        code, out, err = run_cli(["-u", str(STRANGER_UID), "--quiet", str(missing), str(self.root)])
        self.assertEqual(code, 0)
        self.assertIn(f'Unable to resolve path "{missing}"', err)

    def test_no_scannable_root_is_an_error(self) -> None:
        code, _, err = run_cli(["-u", str(STRANGER_UID), str(self.root / "nope")])
        self.assertEqual(code, 1)
        self.assertIn("No paths could be scanned", err)

    def test_unknown_group_name_is_fatal(self) -> None:
        code, out, err = run_cli(["-u", str(STRANGER_UID), "-g", "definitely-not-a-group-xyz", str(self.root)])
        self.assertEqual(code, 1)
        self.assertIn("Unknown/invalid group: definitely-not-a-group-xyz", err)
        self.assertNotIn(str(self.data), out)

    def test_unknown_numeric_group_is_kept(self) -> None:
        with mock.patch("grp.getgrgid", side_effect=KeyError(987654)):
            code, out, err = run_cli(["-u", str(STRANGER_UID), "-g", "987654", "--quiet", str(self.root)])
        self.assertEqual(code, 0)
        self.assertIn("987654(?)", out)
        self.assertIn("Unable to find gid 987654", err)

    def test_invalid_user_is_fatal(self) -> None:
        code, _, err = run_cli(["-u", "no-such-user-xyz", str(self.root)])
        self.assertEqual(code, 1)
        self.assertIn("Invalid user id: no-such-user-xyz", err)

    def test_json_output_file(self) -> None:
        target = self.root / "out" / "report.json"
        code, _, _ = run_cli(["-u", str(STRANGER_UID), "--quiet", "--format", "json", "--output", str(target), str(self.root)])
        self.assertEqual(code, 0)
        report = json.loads(target.read_text(encoding="utf-8"))
        self.assertEqual(report["identity"]["uid"], STRANGER_UID)
        setuid = next(c for c in report["categories"] if c["category"] == "setuid")
        self.assertEqual([f["path"] for f in setuid["findings"]], [str(self.tool)])

    def test_text_output_file(self) -> None:
        target = self.root / "report.txt"
        code, _, _ = run_cli(["-u", str(STRANGER_UID), "--quiet", "--output", str(target), str(self.root)])
        self.assertEqual(code, 0)
        lines = target.read_text(encoding="utf-8").splitlines()
        self.assertTrue(lines[0].startswith(f"[*] uid={STRANGER_UID}(?)"))
        self.assertIn("[*] Found 1 entries that are writable", lines)

    def test_config_supplies_defaults(self) -> None:
        config = self.root / "config.json"
        config.write_text(
            json.dumps({"user": STRANGER_UID, "extended": True, "paths": [str(self.root)]}),
            encoding="utf-8",
        )
        code, out, err = run_cli(["--config", str(config)])
        self.assertEqual(code, 0)
        self.assertIn("[*] Found", err)
        self.assertIn("entries that are only executable", err)
        self.assertIn(f"uid={STRANGER_UID}(?)", out)

    def test_bad_config_is_reported(self) -> None:
        config = self.root / "config.json"
        config.write_text("[1, 2]", encoding="utf-8")
        code, _, err = run_cli(["--config", str(config), str(self.root)])
        self.assertEqual(code, 1)
        self.assertIn("must contain a JSON object", err)

    def test_missing_config_is_reported(self) -> None:
        code, _, err = run_cli(["--config", str(self.root / "absent.json"), str(self.root)])
        self.assertEqual(code, 1)
        self.assertIn("Config file not found", err)

    def test_no_paths_is_a_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            run_cli(["-u", str(STRANGER_UID)])
        self.assertEqual(caught.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
