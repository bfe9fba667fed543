#!/usr/bin/env python3
"""
Random fuzzer for the lexhtml tokenizer.
Generates invalid/malformed markup and checks that every input tokenizes to
completion: no exception, exactly one trailing EOFToken, lowercase names and
unique attribute names.
"""

import argparse
import random
import string
import sys
import time
import traceback

from lexhtml import EOFToken, Tag, TokenizerOpts, tokenize
from lexhtml.tokens import DoctypeToken

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "ul", "li", "form",
    "input", "button", "select", "textarea", "script", "style", "br", "hr",
    "h1", "svg", "math", "template", "pre", "code", "section", "plaintext",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value",
    "type", "onclick", "data-x", "aria-label", "disabled", "checked", "hidden",
]

SPECIAL_CHARS = [
    "\x00", "\x01", "\x0b", "\x0c", "\x0e", "\x7f",  # Control chars
    "\ufffd",  # Replacement character
    "\u00a0",  # Non-breaking space
    "\u2028", "\u2029",  # Line/paragraph separators
    "\u200b", "\u200d",  # Zero-width chars
    "\ufeff",  # BOM
    "\u0131", "\u017f",  # Uppercase to ASCII letters under str.upper()
]

ENTITIES = [
    "&amp;", "&lt;", "&gt;", "&quot;", "&apos;", "&nbsp;",
    "&", "&amp", "&ampamp;", "&am", "&#", "&#x", "&#123", "&#x1f;",
    "&#xdeadbeef;", "&#99999999;", "&#-1;", "&#x;", "&unknown;",
    "&AMP;", "&AMP", "&LT", "&GT", "&copy=", "&notit;",
    "&#0;", "&#x0;", "&#x0D;", "&#13;",  # Null and CR
    "&#128;", "&#x80;", "&#159;", "&#x9F;",  # C1 control range
    "&#xD800;", "&#xDFFF;",  # Surrogate range
    "&#x10FFFF;", "&#x110000;", "&#xFFFE;",  # Max, over max, noncharacter
    "&#0000000000000000065;",  # Leading zeros
    "&NotEqualTilde;", "&CounterClockwiseContourIntegral;",
]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace():
    """Generate random whitespace (including weird ones)."""
    ws = [" ", "\t", "\n", "\r", "\r\n", "\f", "\v", "\x00", ""]
    return "".join(random.choices(ws, k=random.randint(0, 5)))


def fuzz_tag_name():
    """Generate malformed tag names."""
    strategies = [
        lambda: random.choice(TAGS),
        lambda: random.choice(TAGS).upper(),
        lambda: random.choice(TAGS) + random_string(1, 5),
        lambda: random_string(1, 10),
        lambda: "",
        lambda: random.choice(SPECIAL_CHARS) + random.choice(TAGS),
        lambda: random.choice(TAGS) + random.choice(SPECIAL_CHARS),
        lambda: "0" + random.choice(TAGS),
        lambda: random.choice(TAGS) + "/" + random.choice(TAGS),
        lambda: " " + random.choice(TAGS),
        lambda: random.choice(TAGS) + "\x00",
    ]
    return random.choice(strategies)()


def fuzz_attribute():
    """Generate malformed attributes."""
    name_strategies = [
        lambda: random.choice(ATTRIBUTES),
        lambda: random.choice(ATTRIBUTES).upper(),
        lambda: random_string(1, 15),
        lambda: "",
        lambda: random.choice(SPECIAL_CHARS),
        lambda: "=",
        lambda: '"',
        lambda: "'",
        lambda: "<",
        lambda: "/",
    ]

    value_strategies = [
        lambda: random_string(0, 50),
        lambda: '"' + random_string() + '"',
        lambda: "'" + random_string() + "'",
        lambda: random.choice(ENTITIES),
        lambda: random_string(0, 5) + random.choice(ENTITIES) + random_string(0, 5),
        lambda: random.choice(SPECIAL_CHARS) * random.randint(1, 10),
        lambda: "\n" * random.randint(1, 5) + random_string(),
        lambda: "`<=",
        lambda: "",
        lambda: "x" * random.randint(100, 1000),
    ]

    quote_styles = [
        ('="', '"'),
        ("='", "'"),
        ("=", ""),  # Unquoted
        ("= ", ""),  # Space after equals
        ("", ""),  # No value
        ('="', ""),  # Unclosed quote
        ("='", ""),  # Unclosed single quote
        ("==", ""),  # Double equals
    ]

    name = random.choice(name_strategies)()
    value = random.choice(value_strategies)()
    quote_start, quote_end = random.choice(quote_styles)

    return f"{name}{quote_start}{value}{quote_end}"


def fuzz_duplicate_attributes():
    """Generate tags repeating the same attribute in different cases."""
    name = random.choice(ATTRIBUTES)
    attrs = [f"{random.choice([name, name.upper()])}={random_string(0, 5)}" for _ in range(random.randint(2, 5))]
    return f"<{random.choice(TAGS)} {' '.join(attrs)}>"


def fuzz_open_tag():
    """Generate malformed opening tags."""
    tag = fuzz_tag_name()
    ws1 = random_whitespace()

    attrs = [fuzz_attribute() for _ in range(random.randint(0, 5))]
    attr_str = " ".join(attrs)

    ws2 = random_whitespace()

    closings = [">", "/>", " >", "/ >", "", ">>", "/>>", ">/", "\x00>", "/x>"]
    closing = random.choice(closings)

    openings = ["<", "< ", "<\x00", "<<", "<!!", "<!", "<?", "</"]
    opening = random.choice(openings) if random.random() < 0.2 else "<"

    return f"{opening}{tag}{ws1}{attr_str}{ws2}{closing}"


def fuzz_close_tag():
    """Generate malformed closing tags."""
    tag = fuzz_tag_name()
    ws = random_whitespace()

    variants = [
        f"</{tag}>",
        f"</ {tag}>",
        f"</{tag} >",
        f"</{tag}{ws}>",
        f"</{tag}",  # Unclosed
        f"</{tag}/>",  # Self-closing end tag
        f"<//{tag}>",
        f"</{tag} garbage>",
        f"</ {tag} {fuzz_attribute()}>",
        f"</{tag}\x00>",
        "</>",
        "</",
    ]
    return random.choice(variants)


def fuzz_comment():
    """Generate malformed comments."""
    content = random_string(0, 50)

    variants = [
        f"<!--{content}-->",
        f"<!-{content}-->",
        f"<!--{content}->",
        f"<!--{content}",
        f"<!---{content}--->",
        f"<!--{content}--!>",
        f"<!--{content}--!-{content}-->",
        "<!---->",
        "<!-->",
        "<!--->",
        f"<!--{content}<!--{content}-->",
        f"<!--{content}<!-{content}-->",
        f"<!--{content}<<!--->",
        f"<!--{content}--{content}-->",
        f"<! --{content}-->",
        f"<!{content}>",
        f"<?{content}>",
        f"<?{content}",
    ]
    return random.choice(variants)


def fuzz_doctype():
    """Generate malformed doctypes."""
    ident = random_string(0, 20)
    variants = [
        "<!DOCTYPE html>",
        "<!doctype html>",
        "<!DoCtYpE HTML>",
        "<!DOCTYPE>",
        "<!DOCTYPE html PUBLIC>",
        "<!DOCTYPE html SYSTEM>",
        "<!DOCTYPE html PUBLIC \"\" \"\">",
        f"<!DOCTYPE html PUBLIC \"{ident}\" '{ident}'>",
        f"<!DOCTYPE html PUBLIC\"{ident}\">",
        f"<!DOCTYPE html SYSTEM'{ident}'>",
        f"<!DOCTYPE html PUBLIC \"{ident}\"\"{ident}\">",
        f"<!DOCTYPE html SYSTEM \"{ident}\" junk>",
        f"<!DOCTYPE html PUBLIC \"{ident}>",
        f"<!DOCTYPE html PUBLIC {ident}>",
        f"<!DOCTYPE html SYSTEM \"{ident}",
        "<!DOCTYPE " + random_string() + ">",
        "<!DOCTYPE html " + random_string(10, 50) + ">",
        "<!DOCTYPE",
        "<!DOCTYPE html PUB",
        "<! DOCTYPE html>",
        "<!DOCTYPEhtml>",
        "<!DOCTYPE\x00html>",
    ]
    return random.choice(variants)


def fuzz_cdata():
    """Generate malformed CDATA sections."""
    content = random_string(0, 30)
    variants = [
        f"<![CDATA[{content}]]>",
        f"<![CDATA[{content}",
        f"<![CDATA[{content}]>",
        f"<![CDATA[{content}]]",
        f"<![CDATA[{content}]]]>",
        "<![CDATA[]]>",
        f"<![CDATA{content}]]>",
        f"<![ CDATA[{content}]]>",
        f"<![cdata[{content}]]>",
    ]
    return random.choice(variants)


def fuzz_text():
    """Generate text content with edge cases."""
    strategies = [
        lambda: random_string(1, 50),
        lambda: random.choice(ENTITIES),
        lambda: "".join(random.choices(SPECIAL_CHARS, k=random.randint(1, 10))),
        lambda: "<" + random_string(1, 5),  # Incomplete tag
        lambda: "&" + random_string(1, 10),  # Incomplete reference
        lambda: random_string() + ">" + random_string(),  # Stray >
        lambda: "\x00" * random.randint(1, 5),
        lambda: "\r\n" * random.randint(1, 5),
        lambda: " " * random.randint(10, 100),
    ]
    return random.choice(strategies)()


def fuzz_nested_structure(depth=0, max_depth=10):
    """Generate nested (possibly unbalanced) structure."""
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()

    tag = random.choice(TAGS)
    children = [fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3))]
    content = "".join(children)

    if random.random() < 0.2:
        return f"<{tag}>{content}"
    if random.random() < 0.1:
        return f"<{tag}>{content}</{random.choice(TAGS)}>"

    return f"<{tag}>{content}</{tag}>"


def fuzz_truncated():
    """Cut a well-formed construct at a random offset so input ends mid-token."""
    source = random.choice([fuzz_open_tag, fuzz_close_tag, fuzz_comment, fuzz_doctype, fuzz_cdata])()
    if not source:
        return source
    return source[: random.randint(0, len(source))]


def generate_fuzzed_html():
    """Generate a complete fuzzed document."""
    parts = []

    if random.random() < 0.5:
        parts.append(fuzz_doctype())

    num_elements = random.randint(1, 20)
    for _ in range(num_elements):
        element_type = random.choices(
            [
                fuzz_open_tag,
                fuzz_close_tag,
                fuzz_comment,
                fuzz_text,
                fuzz_cdata,
                fuzz_doctype,
                fuzz_nested_structure,
                fuzz_duplicate_attributes,
            ],
            weights=[20, 10, 8, 15, 3, 3, 8, 3],
        )[0]
        parts.append(element_type())

    # End mid-construct some of the time
    if random.random() < 0.3:
        parts.append(fuzz_truncated())

    return "".join(parts)


def check_tokens(tokens):
    """Return a description of the first broken stream property, or None."""
    if not tokens or not isinstance(tokens[-1], EOFToken):
        return "stream does not end with EOFToken"
    if sum(1 for token in tokens if isinstance(token, EOFToken)) != 1:
        return "stream holds more than one EOFToken"
    for token in tokens:
        if isinstance(token, Tag):
            if token.name != token.name.translate(_ASCII_LOWER_TABLE):
                return f"tag name not lowercased: {token!r}"
            names = [attr.name for attr in token.attrs]
            if len(names) != len(set(names)):
                return f"duplicate attribute names kept: {token!r}"
            if token.kind == Tag.END and token.self_closing:
                return f"self-closing end tag: {token!r}"
        elif isinstance(token, DoctypeToken):
            name = token.doctype.name
            if name is not None and name != name.translate(_ASCII_LOWER_TABLE):
                return f"doctype name not lowercased: {token!r}"
    return None


_ASCII_LOWER_TABLE = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False, cdata_sections=True):
    """Run the fuzzer against the tokenizer."""
    if seed is not None:
        random.seed(seed)

    opts = TokenizerOpts(exact_errors=True, cdata_sections=cdata_sections)
    crashes = []
    violations = []
    hangs = []
    successes = 0

    print(f"Fuzzing lexhtml tokenizer with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            tokens = list(tokenize(html, opts, collect_errors=True))
            elapsed = time.perf_counter() - start
        except Exception as e:
            crashes.append({
                "test_num": i,
                "html": html,
                "error": f"{type(e).__name__}: {e}",
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        problem = check_tokens(tokens)
        if problem is not None:
            violations.append({"test_num": i, "html": html, "error": problem})
            if verbose:
                print(f"  VIOLATION: Test {i}: {problem}")
        elif elapsed > 5.0:
            hangs.append({"test_num": i, "html": html, "time": elapsed})
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")
        else:
            successes += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS: lexhtml")
    print(f"{'=' * 60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Violations:     {len(violations)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    if elapsed_total > 0:
        print(f"Tests/second:   {num_tests / elapsed_total:.1f}")

    failures = crashes + violations
    if failures:
        print(f"\n{'=' * 60}")
        print("FAILURE DETAILS:")
        print(f"{'=' * 60}")
        for failure in failures[:10]:
            print(f"\nTest #{failure['test_num']}:")
            print(f"  HTML: {failure['html'][:200]!r}...")
            print(f"  Error: {failure['error']}")
        if len(failures) > 10:
            print(f"\n... and {len(failures) - 10} more failures")

    if hangs:
        print(f"\n{'=' * 60}")
        print("HANG DETAILS:")
        print(f"{'=' * 60}")
        for hang in hangs[:5]:
            print(f"\nTest #{hang['test_num']} ({hang['time']:.2f}s):")
            print(f"  HTML: {hang['html'][:200]!r}...")

    if save_failures and (failures or hangs):
        filename = f"fuzz_failures_lexhtml_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write("Fuzzing results for lexhtml\n")
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']!r}\n")
                f.write(f"Error: {failure['error']}\n")
                if "traceback" in failure:
                    f.write(f"Traceback:\n{failure['traceback']}\n")
                f.write("\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']!r}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the lexhtml tokenizer with invalid input")
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
        "--no-cdata",
        action="store_true",
        help="Treat <![CDATA[ as a bogus comment",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no tokenizing)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(repr(generate_fuzzed_html()))
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
        cdata_sections=not args.no_cdata,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
