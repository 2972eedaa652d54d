"""Command line interface.

    turbomin [options] < page.html > page.min.html
    turbomin [options] page.html --output page.min.html
    turbomin [options] a.html b.html c.html     # minified in place, in parallel
"""

import argparse
import os
import sys
from concurrent.futures import ProcessPoolExecutor, as_completed

from .cfg import Cfg
from .minifier import minify

_OPTION_HELP = {
    "minify_js": "Minify JavaScript in <script> tags",
    "minify_css": "Minify CSS in <style> tags and style attributes",
    "do_not_minify_doctype": "Keep the DOCTYPE as written",
    "ensure_spec_compliant_unquoted_attribute_values": (
        "Quote attribute values containing characters the HTML syntax forbids unquoted"
    ),
    "keep_closing_tags": "Keep every closing tag written in the source",
    "keep_html_and_head_opening_tags": "Keep <html> and <head> opening tags",
    "keep_spaces_between_attributes": "Keep a space between every pair of attributes",
    "keep_comments": "Keep all comments",
    "keep_input_type_text_attr": "Keep type=text on <input>",
    "keep_ssi_comments": "Keep server-side include comments (<!--#...-->)",
    "preserve_brace_template_syntax": "Pass {{ }}, {% %} and {# #} through untouched",
    "preserve_chevron_percent_template_syntax": "Pass <% %> through untouched",
    "remove_bangs": "Remove <!...> declarations other than the DOCTYPE",
    "remove_processing_instructions": "Remove <?...?> processing instructions",
}


def build_arg_parser():
    parser = argparse.ArgumentParser(prog="turbomin", description="Minify HTML.")
    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="INPUT",
        help="Files to minify. None reads standard input; several are minified in place.",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the result to this file instead of standard output (single input only)",
    )
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=os.cpu_count() or 1,
        help="Worker processes for multiple inputs (default: CPU count)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace parsing and minification decisions to standard error",
    )
    for name in Cfg.option_names():
        flag = "--" + name.replace("_", "-")
        if name == "keep_ssi_comments":
            parser.add_argument(flag, action=argparse.BooleanOptionalAction, default=True, help=_OPTION_HELP[name])
        else:
            parser.add_argument(flag, action="store_true", help=_OPTION_HELP[name])
    return parser


def cfg_from_args(args):
    return Cfg(**{name: getattr(args, name) for name in Cfg.option_names()})


def minify_file(path, cfg, debug=False):
    """Minify one file in place.

    Returns:
        tuple: (path, error message or None)
    """
    try:
        with open(path, "rb") as f:
            src = f.read()
    except OSError as e:
        return path, f"Could not read source file: {e.strerror or e}"

    minified = minify(src, cfg, debug=debug)

    try:
        with open(path, "wb") as f:
            f.write(minified)
    except OSError as e:
        return path, f"Could not write output file: {e.strerror or e}"
    return path, None


def _run_batch(paths, cfg, jobs, debug):
    with ProcessPoolExecutor(max_workers=max(1, jobs)) as pool:
        futures = {pool.submit(minify_file, path, cfg, debug): path for path in paths}
        for future in as_completed(futures):
            try:
                path, error = future.result()
            except Exception as e:
                # A crashed worker or pool fails only its own file
                path, error = futures[future], f"Minification failed: {e!r}"
            if error is None:
                print(path, flush=True)
            else:
                print(f"[{path}] {error}", file=sys.stderr, flush=True)
    return 0


def _run_single(path, output, cfg, debug):
    if path is None:
        src = sys.stdin.buffer.read()
    else:
        try:
            with open(path, "rb") as f:
                src = f.read()
        except OSError as e:
            print(f"[{path}] Could not read source file: {e.strerror or e}", file=sys.stderr)
            return 1

    minified = minify(src, cfg, debug=debug)

    if output is None:
        sys.stdout.buffer.write(minified)
        sys.stdout.buffer.flush()
        return 0
    try:
        with open(output, "wb") as f:
            f.write(minified)
    except OSError as e:
        print(f"[{output}] Could not write output file: {e.strerror or e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    if len(args.inputs) > 1 and args.output is not None:
        print("Cannot provide --output when multiple inputs are provided.", file=sys.stderr)
        return 1

    cfg = cfg_from_args(args)
    if len(args.inputs) > 1:
        return _run_batch(args.inputs, cfg, args.jobs, args.debug)
    return _run_single(args.inputs[0] if args.inputs else None, args.output, cfg, args.debug)
