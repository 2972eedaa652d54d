#!/usr/bin/env python3
"""
Random fuzzer for the minifier.
Generates invalid/malformed HTML and checks that minification never crashes,
never makes the input longer, and gives the same result when run twice.
"""

import argparse
import random
import string
import sys
import time
import traceback

from turbomin import Cfg, minify

TAGS = [
    "div", "span", "p", "a", "b", "i", "em", "img", "table", "caption", "colgroup", "col",
    "thead", "tbody", "tfoot", "tr", "td", "th", "ul", "ol", "li", "dl", "dt", "dd",
    "form", "input", "button", "select", "optgroup", "option", "textarea", "script", "style",
    "head", "body", "html", "title", "meta", "link", "br", "hr", "h1", "h2", "pre", "code",
    "ruby", "rt", "rp", "svg", "math", "template", "noscript", "plaintext", "xmp", "listing",
]

VOID_TAGS = ["area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"]

FOREIGN_TAGS = [
    "g", "path", "circle", "text", "tspan", "foreignObject", "desc", "linearGradient",
    "mi", "mo", "mn", "mtext", "annotation-xml", "semantics",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value", "type",
    "method", "onclick", "data-x", "disabled", "checked", "selected", "hidden", "viewBox",
]

ENTITIES = [
    "&amp;", "&lt;", "&gt;", "&quot;", "&nbsp;", "&", "&amp", "&ampamp;", "&am", "&#",
    "&#x", "&#123", "&#x1f;", "&#xdeadbeef;", "&#0;", "&#13;", "&#128;", "&#xD800;",
    "&notin;", "&notit;", "&copy=", "&unknown;",
]

TEMPLATE_SNIPPETS = ["{{ a }}", "{% if x %}", "{# c #}", "{{", "{%", "<%= y %>", "<% z", "}}"]

WHITESPACE = [" ", "\t", "\n", "\r", "\f", "\r\n", ""]


def random_string(min_len=0, max_len=12):
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace():
    return "".join(random.choices(WHITESPACE, k=random.randint(0, 4)))


def fuzz_text():
    parts = []
    for _ in range(random.randint(1, 5)):
        choice = random.random()
        if choice < 0.4:
            parts.append(random_string(1, 10))
        elif choice < 0.6:
            parts.append(random_whitespace() or " ")
        elif choice < 0.8:
            parts.append(random.choice(ENTITIES))
        else:
            parts.append(random.choice(["<", ">", "</", "<!", "<?", "\x00", "'", '"']))
    return "".join(parts)


def fuzz_attribute():
    name = random.choice(ATTRIBUTES)
    if random.random() < 0.1:
        name = name.upper()
    choice = random.random()
    if choice < 0.2:
        return name
    value = fuzz_text() if random.random() < 0.3 else random_string(0, 8)
    if choice < 0.5:
        return f'{name}="{value}"'
    if choice < 0.7:
        return f"{name}='{value}'"
    if choice < 0.8:
        return f"{name}={random.choice(TEMPLATE_SNIPPETS)}"
    return f"{name}={value.replace(' ', '')}"


def fuzz_open_tag(names=TAGS):
    name = random.choice(names)
    attrs = [fuzz_attribute() for _ in range(random.randint(0, 3))]
    separator = random.choice([" ", "  ", "\n", "/"])
    tail = random.choice([">", ">", ">", "/>", " />", ""])
    return f"<{name}{separator if attrs else ''}{separator.join(attrs)}{tail}"


def fuzz_close_tag():
    choice = random.random()
    if choice < 0.8:
        return f"</{random.choice(TAGS)}>"
    return random.choice(["</>", "</ x>", "</p", "</br>", "</3>"])


def fuzz_comment():
    return random.choice(
        [
            f"<!--{fuzz_text()}-->",
            f"<!--#include virtual=\"{random_string()}\" -->",
            "<!---->",
            "<!-->",
            "<!--->",
            f"<!--{random_string()}--!>",
            f"<!--{random_string()}",
        ]
    )


def fuzz_markup_declaration():
    return random.choice(
        [
            "<!DOCTYPE html>",
            "<!doctype HTML >",
            f"<!DOCTYPE {random_string()}>",
            "<![CDATA[x<y]]>",
            f"<?xml {random_string()}?>",
            f"<?php echo {random_string()};",
            "<!",
        ]
    )


def fuzz_raw_text():
    name = random.choice(["script", "style", "textarea", "title", "xmp"])
    body = random.choice(
        [
            "var a = 1 < 2 && b;",
            "a { color : red ; }",
            f"</{name.upper()}",
            f"<!--<{name}>-->",
            fuzz_text(),
        ]
    )
    attrs = random.choice(["", " type=module", ' type="text/plain"', " type=text/less"])
    end = random.choice([f"</{name}>", f"</{name} >", ""])
    return f"<{name}{attrs}>{body}{end}"


def fuzz_foreign():
    root = random.choice(["svg", "math"])
    parts = [f"<{root}>"]
    for _ in range(random.randint(1, 4)):
        choice = random.random()
        if choice < 0.5:
            parts.append(fuzz_open_tag(FOREIGN_TAGS))
        elif choice < 0.7:
            parts.append(f"</{random.choice(FOREIGN_TAGS)}>")
        elif choice < 0.8:
            parts.append("<![CDATA[a]]>")
        else:
            parts.append(fuzz_text())
    if random.random() < 0.7:
        parts.append(f"</{root}>")
    return "".join(parts)


def fuzz_list_and_table():
    return random.choice(
        [
            "<ul><li>a<li>b</ul>",
            "<dl><dt>a<dd>b<dt>c</dl>",
            "<table><caption>c<colgroup><col><tbody><tr><td>1<td>2<tr><th>3</table>",
            "<select><optgroup><option>a<option>b</select>",
            "<ruby>a<rp>(<rt>b<rp>)</ruby>",
            "<p>a<p>b<div>c</div>",
            "<html><head><title>x</title></head><body>y</body></html>",
        ]
    )


def fuzz_nested_structure(depth=0, max_depth=6):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    name = random.choice(TAGS)
    inner = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3)))
    end = f"</{name}>" if random.random() < 0.7 else ""
    return f"<{name}>{random_whitespace()}{inner}{random_whitespace()}{end}"


FUZZERS = [
    (fuzz_text, 3),
    (fuzz_open_tag, 4),
    (fuzz_close_tag, 2),
    (fuzz_comment, 1),
    (fuzz_markup_declaration, 1),
    (fuzz_raw_text, 1),
    (fuzz_foreign, 1),
    (fuzz_list_and_table, 1),
    (fuzz_nested_structure, 2),
    (lambda: random.choice(TEMPLATE_SNIPPETS), 1),
    (lambda: f"<{random.choice(VOID_TAGS)}>", 1),
]


def generate_fuzzed_html():
    functions = [fn for fn, _ in FUZZERS]
    weights = [weight for _, weight in FUZZERS]
    parts = random.choices(functions, weights=weights, k=random.randint(1, 12))
    return "".join(fn() for fn in parts)


def random_cfg():
    return Cfg(**{name: random.random() < 0.3 for name in Cfg.option_names()})


def check(html, cfg):
    """Return a failure description, or None when the input behaves."""
    src = html.encode("utf-8", "surrogatepass")
    once = minify(src, cfg)
    if len(once) > len(src):
        return f"output grew from {len(src)} to {len(once)} bytes"
    twice = minify(once, cfg)
    if twice != once:
        return f"not idempotent: {once!r} -> {twice!r}"
    return None


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False, all_options=False):
    if seed is not None:
        random.seed(seed)

    crashes = []
    failures = []
    hangs = []
    successes = 0

    print(f"Fuzzing turbomin with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()
        cfg = random_cfg() if all_options else Cfg()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            problem = check(html, cfg)
            elapsed = time.perf_counter() - start
        except Exception as e:
            crashes.append({"test_num": i, "html": html, "cfg": cfg, "error": str(e), "traceback": traceback.format_exc()})
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        if problem is not None:
            failures.append({"test_num": i, "html": html, "cfg": cfg, "error": problem})
            if verbose:
                print(f"  FAIL: Test {i}: {problem}")
        elif elapsed > 5.0:
            hangs.append({"test_num": i, "html": html, "time": elapsed})
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")
        else:
            successes += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS")
    print(f"{'=' * 60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Failures:       {len(failures)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Tests/second:   {num_tests / elapsed_total:.1f}")

    for title, items in (("CRASH DETAILS", crashes), ("FAILURE DETAILS", failures)):
        if not items:
            continue
        print(f"\n{'=' * 60}")
        print(f"{title}:")
        print(f"{'=' * 60}")
        for item in items[:10]:
            print(f"\nTest #{item['test_num']}:")
            print(f"  HTML: {item['html'][:200]!r}")
            print(f"  Cfg:  {item['cfg']}")
            print(f"  Error: {item['error']}")
        if len(items) > 10:
            print(f"\n... and {len(items) - 10} more")

    if save_failures and (crashes or failures or hangs):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"HTML:\n{crash['html']!r}\nCfg: {crash['cfg']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for failure in failures:
                f.write(f"=== FAIL #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']!r}\nCfg: {failure['cfg']}\n")
                f.write(f"Error: {failure['error']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']!r}\n\n")
        print(f"\nFailures saved to {filename}")

    return not (crashes or failures or hangs)


def main():
    parser = argparse.ArgumentParser(description="Fuzz the minifier with invalid input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--all-options",
        action="store_true",
        help="Use a random combination of minification options for every case",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed HTML documents (no minifying)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
        all_options=args.all_options,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
