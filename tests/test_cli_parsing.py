"""Tests for CLI argument parsing and command dispatch."""

import zipfile

import pikepdf
import pytest
from conftest import page_labels
from PIL import Image

from pdfsuite.cli import _ProgressPrinter, _parse_order, _parse_page_list, build_parser, main
from pdfsuite.services.pdf_operations import OperationResult, protect_pdf
from pdfsuite.utils.progress_state import ProcessingStatus


class TestParseOrder:
    """Tests for _parse_order."""

    def test_order_kept(self):
        assert _parse_order("3,1,2") == [3, 1, 2]

    def test_duplicates_kept(self):
        assert _parse_order("2, 2") == [2, 2]

    def test_empty_parts_skipped(self):
        assert _parse_order(",1,,2,") == [1, 2]

    def test_invalid_raises(self):
        with pytest.raises(ValueError, match="Invalid page order"):
            _parse_order("1-3")


class TestParsePageList:
    """Tests for _parse_page_list."""

    def test_mixed(self):
        assert _parse_page_list("1-3,7,10-12") == [1, 2, 3, 7, 10, 11, 12]

    def test_deduplicates(self):
        assert _parse_page_list("1-3,2-4") == [1, 2, 3, 4]

    def test_invalid_raises(self):
        with pytest.raises(ValueError, match="Invalid page specification"):
            _parse_page_list("abc")

    def test_empty_string(self):
        assert _parse_page_list("") == []


class TestBuildParser:
    """Tests for build_parser."""

    def test_no_command(self):
        args = build_parser().parse_args([])
        assert args.command is None

    def test_split_defaults(self):
        args = build_parser().parse_args(["split", "in.pdf"])
        assert args.command == "split"
        assert args.output is None
        assert args.archive is None
        assert args.pages is None

    def test_split_no_archive(self):
        args = build_parser().parse_args(["split", "in.pdf", "--no-archive"])
        assert args.archive is False

    def test_extract_requires_pages(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["extract", "in.pdf"])

    def test_extract_separate(self):
        args = build_parser().parse_args(
            ["extract", "in.pdf", "--pages", "1,3", "--separate", "--no-archive"]
        )
        assert args.separate is True
        assert args.archive is False

    def test_reorder_mutually_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["reorder", "in.pdf", "--order", "2,1", "--reverse"])

    def test_rotate_angle_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["rotate", "in.pdf", "--angle", "45"])

    def test_watermark_alignment_uppercased(self):
        args = build_parser().parse_args(["watermark", "in.pdf", "--alignment", "tl"])
        assert args.alignment == "TL"

    def test_watermark_text_or_image(self):
        args = build_parser().parse_args(["watermark", "in.pdf", "--image", "logo.png"])
        assert str(args.image) == "logo.png"
        assert args.text is None
        with pytest.raises(SystemExit):
            build_parser().parse_args(
                ["watermark", "in.pdf", "--text", "DRAFT", "--image", "logo.png"]
            )

    def test_idcard_sides(self):
        args = build_parser().parse_args(["idcard", "front.jpg", "back.jpg"])
        assert (str(args.front), str(args.back)) == ("front.jpg", "back.jpg")
        assert args.output is None

    def test_merge_inputs(self):
        args = build_parser().parse_args(["merge", "a.pdf", "b.pdf", "-o", "m.pdf"])
        assert [str(p) for p in args.inputs] == ["a.pdf", "b.pdf"]

    def test_verbose_flag(self):
        args = build_parser().parse_args(["-v", "tools"])
        assert args.verbose is True


class TestMain:
    """End-to-end runs of main() against real files."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_missing_input(self, tmp_path, capsys):
        assert main(["info", str(tmp_path / "nope.pdf")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_tools_listing(self, capsys):
        assert main(["tools"]) == 0
        out = capsys.readouterr().out
        assert "split" in out
        assert "watermark" in out

    def test_info(self, make_pdf, capsys):
        assert main(["info", make_pdf(4)]) == 0
        assert "Pages:      4" in capsys.readouterr().out

    def test_split_default_archive(self, make_pdf, tmp_path, isolated_config):
        src = make_pdf(2, name="report.pdf")
        assert main(["split", src]) == 0
        with zipfile.ZipFile(tmp_path / "report_pages.zip") as zf:
            assert zf.namelist() == ["Page_1.pdf", "Page_2.pdf"]

    def test_split_archive_setting_respected(self, make_pdf, tmp_path, isolated_config):
        isolated_config.set("split.package_as_archive", False, save_immediately=False)
        src = make_pdf(2, name="report.pdf")
        assert main(["split", src]) == 0
        assert (tmp_path / "report_pages" / "Page_2.pdf").exists()

    def test_extract_default_output(self, make_pdf, tmp_path, isolated_config):
        src = make_pdf(5, name="doc.pdf")
        assert main(["extract", src, "--pages", "5,1"]) == 0
        assert page_labels(tmp_path / "extracted_doc.pdf") == [5, 1]

    def test_delete_all_fails(self, make_pdf, tmp_path, isolated_config, capsys):
        src = make_pdf(2)
        assert main(["delete", src, "--pages", "1-2", "-o", str(tmp_path / "o.pdf")]) == 1
        assert "You cannot delete all pages." in capsys.readouterr().err

    def test_reorder_reverse(self, make_pdf, tmp_path, isolated_config):
        out = tmp_path / "rev.pdf"
        assert main(["reorder", make_pdf(3), "--reverse", "-o", str(out)]) == 0
        assert page_labels(out) == [3, 2, 1]

    def test_configured_prefix(self, make_pdf, tmp_path, isolated_config):
        isolated_config.set("output.prefixes.repair", "fixed_", save_immediately=False)
        src = make_pdf(1, name="doc.pdf")
        assert main(["repair", src]) == 0
        assert (tmp_path / "fixed_doc.pdf").exists()

    def test_invalid_style_reported(self, make_pdf, isolated_config, capsys):
        assert main(["number", make_pdf(1), "--color", "blue"]) == 1
        assert "color" in capsys.readouterr().err

    def test_merge_missing_file(self, make_pdf, tmp_path, capsys):
        assert main(["merge", make_pdf(1), str(tmp_path / "nope.pdf")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_info_corrupt_file(self, tmp_path, capsys):
        src = tmp_path / "bad.pdf"
        src.write_bytes(b"this is not a pdf")
        assert main(["info", str(src)]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error:")
        assert "bad.pdf" in err

    def test_info_encrypted_without_password(self, make_pdf, tmp_path, capsys):
        locked = tmp_path / "locked.pdf"
        protect_pdf(make_pdf(1), locked, "secret")
        assert main(["info", str(locked)]) == 1
        assert "password" in capsys.readouterr().err
        assert main(["info", str(locked), "--password", "secret"]) == 0
        assert "Encrypted:  Yes" in capsys.readouterr().out

    def test_idcard(self, tmp_path, capsys):
        front, back = tmp_path / "front.png", tmp_path / "back.png"
        Image.new("RGB", (428, 270), (0, 0, 255)).save(front)
        Image.new("RGB", (428, 270), (0, 255, 0)).save(back)
        assert main(["idcard", str(front), str(back)]) == 0
        with pikepdf.open(tmp_path / "ID_Card_Merge.pdf") as pdf:
            assert len(pdf.pages) == 1
        assert "Merged:" in capsys.readouterr().out

    def test_idcard_missing_side(self, tmp_path, capsys):
        front = tmp_path / "front.png"
        Image.new("RGB", (428, 270)).save(front)
        assert main(["idcard", str(front), str(tmp_path / "back.png")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_watermark_logo(self, make_pdf, tmp_path, isolated_config):
        logo = tmp_path / "logo.png"
        Image.new("RGBA", (80, 40), (255, 0, 0, 100)).save(logo)
        out = tmp_path / "marked.pdf"
        assert main(["watermark", make_pdf(2), "--image", str(logo), "-o", str(out)]) == 0
        assert page_labels(out) == [1, 2]


class TestProgressPrinter:
    """State handling of the CLI progress callback."""

    def test_walks_loading_processing_success(self, capsys):
        progress = _ProgressPrinter()
        assert progress.state.status is ProcessingStatus.LOADING

        progress(1, 4, "Page 1")
        assert progress.state.status is ProcessingStatus.PROCESSING
        assert progress.state.progress == 25

        progress(4, 4, "Done")
        state = progress.finish(
            OperationResult(success=True, message="ok", output_path="/tmp/out.zip")
        )
        assert state.status is ProcessingStatus.SUCCESS
        assert state.result_name == "out.zip"
        assert "100%" in capsys.readouterr().err

    def test_finish_without_updates(self):
        state = _ProgressPrinter().finish(OperationResult(success=True, message="ok"))
        assert state.status is ProcessingStatus.SUCCESS
        assert state.progress == 100

    def test_failure_ends_in_error(self):
        progress = _ProgressPrinter()
        progress(1, 2, "Page 1")
        state = progress.finish(
            OperationResult(success=False, status=ProcessingStatus.ERROR, message="boom")
        )
        assert state.status is ProcessingStatus.ERROR
        assert state.message == "boom"

    def test_finish_twice_keeps_first_state(self):
        progress = _ProgressPrinter()
        first = progress.finish(OperationResult(success=True, message="ok"))
        assert progress.finish(OperationResult(success=False, message="late")) is first

    def test_split_reports_progress(self, make_pdf, tmp_path, isolated_config, capsys):
        assert main(["split", make_pdf(2), "-o", str(tmp_path / "out.zip")]) == 0
        captured = capsys.readouterr()
        assert "100%" in captured.err
        assert "Split:" in captured.out
