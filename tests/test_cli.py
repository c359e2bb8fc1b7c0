"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest

from crmcard.__main__ import build_parser, main

SAMPLE_VCF = """\
BEGIN:VCARD
VERSION:3.0
N:Doe;Jane;;;
EMAIL;TYPE=WORK:jane@acme.com
END:VCARD
"""


class TestParser:

    def test_import_args(self):
        args = build_parser().parse_args(["import", "cards", "--recursive"])
        assert args.command == "import"
        assert args.path == "cards"
        assert args.recursive is True
        assert args.json is False

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 8000

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2


class TestImportCommand:

    def test_json_output(self, tmp_path, capsys):
        vcf = tmp_path / "a.vcf"
        vcf.write_text(SAMPLE_VCF, encoding="utf-8")
        main(["import", str(vcf), "--json"])
        drafts = json.loads(capsys.readouterr().out)
        assert drafts[0]["first_name"] == "Jane"
        assert drafts[0]["email_work"] == "jane@acme.com"

    def test_table_output(self, tmp_path):
        vcf = tmp_path / "a.vcf"
        vcf.write_text(SAMPLE_VCF, encoding="utf-8")
        main(["import", str(vcf)])

    def test_missing_path_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["import", str(tmp_path / "missing.vcf")])
        assert exc.value.code == 1


class TestExportCommand:

    def test_export_writes_file(self, tmp_path):
        src = tmp_path / "contacts.json"
        src.write_text(json.dumps([
            {"first_name": "Jane", "last_name": "Doe",
             "organization": {"name": "Acme", "role": "CEO"}},
        ]), encoding="utf-8")
        out = tmp_path / "out.vcf"

        main(["export", str(src), "-o", str(out), "--verify"])

        data = out.read_bytes()
        assert data.startswith(b"BEGIN:VCARD\r\nVERSION:3.0\r\nN:Doe;Jane;;;\r\n")
        assert b"ORG:Acme\r\nROLE:CEO\r\n" in data

    def test_export_bad_json_exits(self, tmp_path):
        src = tmp_path / "contacts.json"
        src.write_text("{oops", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main(["export", str(src), "-o", str(tmp_path / "out.vcf")])
        assert exc.value.code == 1

    def test_export_wrong_extension_exits(self, tmp_path):
        src = tmp_path / "contacts.json"
        src.write_text("[]", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main(["export", str(src), "-o", str(tmp_path / "out.txt")])
        assert exc.value.code == 1
