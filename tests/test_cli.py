import contextlib
import io
import os
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import mock

from turbomin import Cfg
from turbomin.cli import build_arg_parser, cfg_from_args, main, minify_file

SOURCE = b"<div>  a  <!-- note -->  </div>"
MINIFIED = b"<div>a</div>"


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def write(self, name, content=SOURCE):
        path = os.path.join(self._tmp.name, name)
        with open(path, "wb") as f:
            f.write(content)
        return path

    def read(self, path):
        with open(path, "rb") as f:
            return f.read()

    def run_main(self, argv):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()


class TestOptions(CliTestCase):
    def test_defaults_match_cfg(self):
        args = build_arg_parser().parse_args([])
        assert cfg_from_args(args) == Cfg()

    def test_flags(self):
        args = build_arg_parser().parse_args(["--minify-css", "--keep-comments", "--no-keep-ssi-comments"])
        cfg = cfg_from_args(args)
        assert cfg.minify_css
        assert cfg.keep_comments
        assert not cfg.keep_ssi_comments
        assert not cfg.minify_js

    def test_every_option_has_a_flag(self):
        parser = build_arg_parser()
        argv = ["--" + name.replace("_", "-") for name in Cfg.option_names()]
        args = parser.parse_args(argv)
        for name in Cfg.option_names():
            assert getattr(args, name) is True


class TestSingleInput(CliTestCase):
    def test_file_to_output_file(self):
        src = self.write("in.html")
        out = os.path.join(self._tmp.name, "out.html")
        code, stdout, stderr = self.run_main([src, "--output", out])
        assert code == 0
        assert stderr == ""
        assert self.read(out) == MINIFIED
        assert self.read(src) == SOURCE

    def test_stdin_to_stdout(self):
        stdin = io.TextIOWrapper(io.BytesIO(SOURCE))
        stdout = io.TextIOWrapper(io.BytesIO())
        with mock.patch("sys.stdin", stdin), mock.patch("sys.stdout", stdout):
            code = main([])
        assert code == 0
        assert stdout.buffer.getvalue() == MINIFIED

    def test_options_applied(self):
        src = self.write("in.html")
        out = os.path.join(self._tmp.name, "out.html")
        self.run_main([src, "-o", out, "--keep-comments"])
        assert self.read(out) == b"<div>a <!-- note --></div>"

    def test_missing_input(self):
        missing = os.path.join(self._tmp.name, "missing.html")
        code, _, stderr = self.run_main([missing, "-o", os.path.join(self._tmp.name, "out.html")])
        assert code == 1
        assert stderr.startswith(f"[{missing}] Could not read source file:")

    def test_unwritable_output(self):
        src = self.write("in.html")
        out = os.path.join(self._tmp.name, "no-such-dir", "out.html")
        code, _, stderr = self.run_main([src, "-o", out])
        assert code == 1
        assert stderr.startswith(f"[{out}] Could not write output file:")


class TestMultipleInputs(CliTestCase):
    def test_output_rejected(self):
        a = self.write("a.html")
        b = self.write("b.html")
        code, _, stderr = self.run_main([a, b, "--output", os.path.join(self._tmp.name, "out.html")])
        assert code == 1
        assert "Cannot provide --output when multiple inputs are provided." in stderr
        assert self.read(a) == SOURCE

    def test_minified_in_place(self):
        a = self.write("a.html")
        b = self.write("b.html", b"<div>  b  </div>")
        code, stdout, stderr = self.run_main([a, b, "-j", "2"])
        assert code == 0
        assert stderr == ""
        assert sorted(stdout.split()) == sorted([a, b])
        assert self.read(a) == MINIFIED
        assert self.read(b) == b"<div>b</div>"

    def test_failure_does_not_stop_batch(self):
        a = self.write("a.html")
        missing = os.path.join(self._tmp.name, "missing.html")
        code, stdout, stderr = self.run_main([a, missing, "-j", "1"])
        assert code == 0
        assert stdout.split() == [a]
        assert stderr.startswith(f"[{missing}] Could not read source file:")
        assert self.read(a) == MINIFIED

    def test_worker_crash_fails_only_its_file(self):
        a = self.write("a.html")
        b = self.write("b.html")

        def crash_on_b(path, cfg, debug=False):
            if path == b:
                raise RuntimeError("boom")
            return minify_file(path, cfg, debug)

        with mock.patch("turbomin.cli.ProcessPoolExecutor", ThreadPoolExecutor), mock.patch(
            "turbomin.cli.minify_file", side_effect=crash_on_b
        ):
            code, stdout, stderr = self.run_main([a, b, "-j", "2"])
        assert code == 0
        assert stdout.split() == [a]
        assert stderr.startswith(f"[{b}] Minification failed: RuntimeError('boom')")
        assert self.read(a) == MINIFIED
        assert self.read(b) == SOURCE


class TestMinifyFile(CliTestCase):
    def test_returns_path_and_no_error(self):
        a = self.write("a.html")
        assert minify_file(a, Cfg()) == (a, None)
        assert self.read(a) == MINIFIED

    def test_read_error(self):
        missing = os.path.join(self._tmp.name, "missing.html")
        path, error = minify_file(missing, Cfg())
        assert path == missing
        assert error.startswith("Could not read source file:")


if __name__ == "__main__":
    unittest.main()
