"""Bloblang function and method reference.

The function and method name registries used by the linter and the
auto-fixer are derived from these tables, so adding an entry here is enough
to make a name "known".
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

BloblangKind = Literal["function", "method"]


@dataclass(frozen=True, slots=True)
class BloblangItem:
    """One documented Bloblang function or method."""

    name: str
    kind: BloblangKind
    category: str
    signature: str
    description: str
    example: str = ""


def _fn(name: str, category: str, signature: str, description: str, example: str = "") -> BloblangItem:
    return BloblangItem(name, "function", category, signature, description, example)


def _m(name: str, category: str, signature: str, description: str, example: str = "") -> BloblangItem:
    return BloblangItem(name, "method", category, signature, description, example)


# fmt: off
BLOBLANG_FUNCTIONS: tuple[BloblangItem, ...] = (
    _fn("batch_index", "message", "batch_index()", "Index of the message within its batch.", "root.idx = batch_index()"),
    _fn("batch_size", "message", "batch_size()", "Size of the current batch.", "root.size = batch_size()"),
    _fn("content", "message", "content()", "Raw message payload as bytes.", "root.raw = content().string()"),
    _fn("count", "general", "count(name)", "Increments and returns a named counter.", 'root.n = count("files")'),
    _fn("counter", "general", "counter(min?, max?)", "Incrementing counter local to the mapping.", "root.seq = counter()"),
    _fn("deleted", "general", "deleted()", "Drops the message or removes the assigned field.", "root = deleted()"),
    _fn("env", "environment", "env(name)", "Value of an environment variable.", 'root.region = env("AWS_REGION")'),
    _fn("error", "message", "error()", "Error message of a failed message, or null.", "root.err = error()"),
    _fn("errored", "message", "errored()", "Whether the message has failed.", "root.failed = errored()"),
    _fn("fake", "fake", "fake(kind)", "Fake data of the given kind.", 'root.email = fake("email")'),
    _fn("file", "environment", "file(path)", "Contents of a file.", 'root.cfg = file("/etc/app.json").parse_json()'),
    _fn("hostname", "environment", "hostname()", "Host name of the machine.", "root.host = hostname()"),
    _fn("json", "message", "json(path?)", "Message payload parsed as JSON, optionally at a path.", 'root.id = json("id")'),
    _fn("ksuid", "general", "ksuid()", "New K-sortable unique ID.", "root.id = ksuid()"),
    _fn("meta", "message", "meta(key)", "Metadata value as a string (legacy form of @key).", 'root.key = meta("kafka_key")'),
    _fn("metadata", "message", "metadata(key?)", "Metadata value, or all metadata as an object.", 'root.topic = metadata("kafka_topic")'),
    _fn("nanoid", "general", "nanoid(length?, alphabet?)", "New nano ID.", "root.id = nanoid()"),
    _fn("nothing", "general", "nothing()", "Leaves the assigned field unchanged.", "root.x = if this.skip { nothing() } else { 1 }"),
    _fn("now", "timestamp", "now()", "Current timestamp as an RFC 3339 string.", "root.ts = now()"),
    _fn("random_int", "number", "random_int(seed?, min?, max?)", "Pseudo-random integer.", "root.r = random_int(max: 100)"),
    _fn("range", "general", "range(start, stop, step?)", "Array of integers.", "root.xs = range(0, 10)"),
    _fn("throw", "general", "throw(message)", "Fails the mapping with an error.", 'root = throw("bad input")'),
    _fn("timestamp_unix", "timestamp", "timestamp_unix()", "Current Unix time in seconds.", "root.ts = timestamp_unix()"),
    _fn("timestamp_unix_micro", "timestamp", "timestamp_unix_micro()", "Current Unix time in microseconds.", "root.ts = timestamp_unix_micro()"),
    _fn("timestamp_unix_milli", "timestamp", "timestamp_unix_milli()", "Current Unix time in milliseconds.", "root.ts = timestamp_unix_milli()"),
    _fn("timestamp_unix_nano", "timestamp", "timestamp_unix_nano()", "Current Unix time in nanoseconds.", "root.ts = timestamp_unix_nano()"),
    _fn("tracing_id", "message", "tracing_id()", "Trace ID of the message.", "root.trace = tracing_id()"),
    _fn("ulid", "general", "ulid()", "New ULID.", "root.id = ulid()"),
    _fn("uuid_v4", "general", "uuid_v4()", "New random UUID.", "root.id = uuid_v4()"),
)

BLOBLANG_METHODS: tuple[BloblangItem, ...] = (
    # General
    _m("apply", "general", "apply(mapping)", "Applies a named map to the value.", 'root.x = this.apply("normalize")'),
    _m("catch", "general", "catch(fallback)", "Fallback value when the expression fails.", "root.n = this.n.number().catch(0)"),
    _m("exists", "object", "exists(path)", "Whether a path exists in an object.", 'root.has = this.exists("user.id")'),
    _m("from", "general", "from(index)", "Evaluates the expression against another message of the batch.", "root.prev = content().from(0)"),
    _m("from_all", "general", "from_all()", "Evaluates the expression against every message of the batch.", "root.all = this.id.from_all()"),
    _m("not_empty", "general", "not_empty()", "Fails when the value is empty.", "root.name = this.name.not_empty()"),
    _m("not_null", "general", "not_null()", "Fails when the value is null.", "root.id = this.id.not_null()"),
    _m("or", "general", "or(fallback)", "Fallback value when the expression is null or fails.", 'root.name = this.name.or("anon")'),
    _m("type", "type", "type()", "Type name of the value.", "root.t = this.x.type()"),
    # Type coercion
    _m("bool", "type", "bool(default?)", "Parses the value as a boolean.", "root.ok = this.ok.bool()"),
    _m("bytes", "type", "bytes()", "Converts the value to bytes.", "root.b = this.s.bytes()"),
    _m("float64", "type", "float64()", "Converts the value to a 64-bit float.", "root.f = this.f.float64()"),
    _m("int64", "type", "int64()", "Converts the value to a 64-bit integer.", "root.i = this.i.int64()"),
    _m("number", "type", "number(default?)", "Parses the value as a number.", "root.n = this.n.number()"),
    _m("string", "type", "string()", "Converts the value to a string.", "root.s = this.n.string()"),
    # Strings
    _m("capitalize", "string", "capitalize()", "Upper-cases the first letter of each word.", "root.t = this.t.capitalize()"),
    _m("contains", "string", "contains(value)", "Whether a string or array contains a value.", 'root.x = this.tags.contains("a")'),
    _m("escape_html", "string", "escape_html()", "Escapes HTML characters.", "root.h = this.h.escape_html()"),
    _m("escape_url_query", "string", "escape_url_query()", "Escapes a URL query value.", "root.q = this.q.escape_url_query()"),
    _m("format", "string", "format(args...)", "printf-style formatting.", 'root.s = "%s-%s".format(this.a, this.b)'),
    _m("has_prefix", "string", "has_prefix(prefix)", "Whether a string starts with a prefix.", 'root.x = this.s.has_prefix("a")'),
    _m("has_suffix", "string", "has_suffix(suffix)", "Whether a string ends with a suffix.", 'root.x = this.s.has_suffix("z")'),
    _m("index_of", "string", "index_of(value)", "Position of a substring or element, or -1.", 'root.i = this.s.index_of("x")'),
    _m("length", "string", "length()", "Length of a string, array or object.", "root.n = this.items.length()"),
    _m("lowercase", "string", "lowercase()", "Lower-cases a string.", "root.s = this.s.lowercase()"),
    _m("quote", "string", "quote()", "Quotes a string.", "root.s = this.s.quote()"),
    _m("replace_all", "string", "replace_all(old, new)", "Replaces every occurrence of a substring.", 'root.s = this.s.replace_all("a", "b")'),
    _m("replace_all_many", "string", "replace_all_many(pairs)", "Replaces several substrings.", 'root.s = this.s.replace_all_many(["a", "b"])'),
    _m("reverse", "string", "reverse()", "Reverses a string or array.", "root.s = this.s.reverse()"),
    _m("slice", "string", "slice(low, high?)", "Substring or sub-array.", "root.s = this.s.slice(0, 3)"),
    _m("split", "string", "split(delimiter)", "Splits a string into an array.", 'root.parts = this.s.split(",")'),
    _m("trim", "string", "trim(cutset?)", "Removes surrounding whitespace.", "root.s = this.s.trim()"),
    _m("trim_prefix", "string", "trim_prefix(prefix)", "Removes a prefix.", 'root.s = this.s.trim_prefix("v")'),
    _m("trim_suffix", "string", "trim_suffix(suffix)", "Removes a suffix.", 'root.s = this.s.trim_suffix("/")'),
    _m("unescape_html", "string", "unescape_html()", "Unescapes HTML characters.", "root.h = this.h.unescape_html()"),
    _m("unescape_url_query", "string", "unescape_url_query()", "Unescapes a URL query value.", "root.q = this.q.unescape_url_query()"),
    _m("unquote", "string", "unquote()", "Unquotes a string.", "root.s = this.s.unquote()"),
    _m("uppercase", "string", "uppercase()", "Upper-cases a string.", "root.s = this.s.uppercase()"),
    # Regular expressions
    _m("re_find_all", "regex", "re_find_all(pattern)", "All matches of a pattern.", 'root.m = this.s.re_find_all("[0-9]+")'),
    _m("re_find_all_object", "regex", "re_find_all_object(pattern)", "All matches as objects of named groups.", 'root.m = this.s.re_find_all_object("(?P<n>[0-9]+)")'),
    _m("re_find_object", "regex", "re_find_object(pattern)", "First match as an object of named groups.", 'root.m = this.s.re_find_object("(?P<n>[0-9]+)")'),
    _m("re_match", "regex", "re_match(pattern)", "Whether a pattern matches.", 'root.ok = this.s.re_match("^a")'),
    _m("re_replace_all", "regex", "re_replace_all(pattern, value)", "Replaces every pattern match.", 'root.s = this.s.re_replace_all("[0-9]", "#")'),
    # Numbers
    _m("abs", "number", "abs()", "Absolute value.", "root.n = this.n.abs()"),
    _m("ceil", "number", "ceil()", "Rounds up.", "root.n = this.n.ceil()"),
    _m("floor", "number", "floor()", "Rounds down.", "root.n = this.n.floor()"),
    _m("log", "number", "log()", "Natural logarithm.", "root.n = this.n.log()"),
    _m("log10", "number", "log10()", "Base-10 logarithm.", "root.n = this.n.log10()"),
    _m("max", "number", "max()", "Largest number of an array.", "root.n = this.xs.max()"),
    _m("min", "number", "min()", "Smallest number of an array.", "root.n = this.xs.min()"),
    _m("round", "number", "round()", "Rounds to the nearest integer.", "root.n = this.n.round()"),
    # Arrays
    _m("all", "array", "all(query)", "Whether every element satisfies a query.", "root.ok = this.xs.all(x -> x > 0)"),
    _m("any", "array", "any(query)", "Whether any element satisfies a query.", "root.ok = this.xs.any(x -> x > 0)"),
    _m("append", "array", "append(values...)", "Appends values to an array.", "root.xs = this.xs.append(4)"),
    _m("collapse", "array", "collapse()", "Collapses nested structures into dot paths.", "root = this.collapse()"),
    _m("concat", "array", "concat(arrays...)", "Concatenates arrays.", "root.xs = this.a.concat(this.b)"),
    _m("enumerated", "array", "enumerated()", "Pairs each element with its index.", "root.xs = this.xs.enumerated()"),
    _m("explode", "array", "explode(path)", "One document per element at a path.", 'root = this.explode("items")'),
    _m("filter", "array", "filter(query)", "Keeps elements satisfying a query.", "root.xs = this.xs.filter(x -> x.active)"),
    _m("first", "array", "first()", "First element.", "root.x = this.xs.first()"),
    _m("flatten", "array", "flatten()", "Flattens nested arrays one level.", "root.xs = this.xs.flatten()"),
    _m("fold", "array", "fold(initial, query)", "Reduces an array to a single value.", "root.sum = this.xs.fold(0, item -> item.tally + item.value)"),
    _m("index", "array", "index(i)", "Element at an index.", "root.x = this.xs.index(0)"),
    _m("join", "array", "join(delimiter?)", "Joins strings with a delimiter.", 'root.s = this.xs.join(",")'),
    _m("last", "array", "last()", "Last element.", "root.x = this.xs.last()"),
    _m("map_each", "array", "map_each(query)", "Transforms each element or object value.", "root.xs = this.xs.map_each(x -> x * 2)"),
    _m("sort", "array", "sort(compare?)", "Sorts an array.", "root.xs = this.xs.sort()"),
    _m("sort_by", "array", "sort_by(query)", "Sorts an array by a derived key.", "root.xs = this.xs.sort_by(x -> x.age)"),
    _m("sum", "array", "sum()", "Sum of an array of numbers.", "root.total = this.xs.sum()"),
    _m("unique", "array", "unique(emit?)", "Removes duplicates.", "root.xs = this.xs.unique()"),
    _m("zip", "array", "zip(arrays...)", "Zips arrays together.", "root.xs = this.a.zip(this.b)"),
    # Objects
    _m("assign", "object", "assign(object)", "Merges an object, overwriting keys.", "root = this.assign(this.extra)"),
    _m("get", "object", "get(path)", "Value at a dynamic path.", 'root.x = this.get("a.b")'),
    _m("key_values", "object", "key_values()", "Array of key/value objects.", "root.kv = this.key_values()"),
    _m("keys", "object", "keys()", "Sorted object keys.", "root.keys = this.keys()"),
    _m("map_each_key", "object", "map_each_key(query)", "Transforms each object key.", "root = this.map_each_key(k -> k.uppercase())"),
    _m("merge", "object", "merge(value)", "Deep-merges two values.", "root = this.merge(this.extra)"),
    _m("values", "object", "values()", "Object values.", "root.vals = this.values()"),
    _m("with", "object", "with(keys...)", "Keeps only the given keys.", 'root = this.with("id", "name")'),
    _m("without", "object", "without(keys...)", "Removes the given keys.", 'root = this.without("password")'),
    # Parsing and encoding
    _m("compress", "encoding", "compress(algorithm, level?)", "Compresses bytes.", 'root = content().compress("gzip")'),
    _m("decode", "encoding", "decode(scheme)", "Decodes base64, hex and other schemes.", 'root = this.b64.decode("base64")'),
    _m("decompress", "encoding", "decompress(algorithm)", "Decompresses bytes.", 'root = content().decompress("gzip")'),
    _m("decrypt_aes", "encoding", "decrypt_aes(scheme, key, iv)", "AES decryption.", 'root = this.v.decrypt_aes("ctr", $key, $iv)'),
    _m("encode", "encoding", "encode(scheme)", "Encodes as base64, hex and other schemes.", 'root.b64 = content().encode("base64")'),
    _m("encrypt_aes", "encoding", "encrypt_aes(scheme, key, iv)", "AES encryption.", 'root = this.v.encrypt_aes("ctr", $key, $iv)'),
    _m("format_json", "parsing", "format_json(indent?)", "Serializes a value as JSON.", "root = this.format_json()"),
    _m("format_xml", "parsing", "format_xml()", "Serializes a value as XML.", "root = this.format_xml()"),
    _m("format_yaml", "parsing", "format_yaml()", "Serializes a value as YAML.", "root = this.format_yaml()"),
    _m("hash", "encoding", "hash(algorithm)", "Hashes bytes.", 'root.h = content().hash("sha256").encode("hex")'),
    _m("parse_csv", "parsing", "parse_csv()", "Parses CSV into an array of objects.", "root = content().parse_csv()"),
    _m("parse_duration", "parsing", "parse_duration()", "Parses a duration string into nanoseconds.", 'root.ns = "1m".parse_duration()'),
    _m("parse_form_url_encoded", "parsing", "parse_form_url_encoded()", "Parses a form-encoded body.", "root = content().string().parse_form_url_encoded()"),
    _m("parse_json", "parsing", "parse_json()", "Parses a JSON string.", "root = this.payload.parse_json()"),
    _m("parse_url", "parsing", "parse_url()", "Parses a URL into its parts.", "root.host = this.url.parse_url().host"),
    _m("parse_xml", "parsing", "parse_xml()", "Parses an XML document.", "root = content().parse_xml()"),
    _m("parse_yaml", "parsing", "parse_yaml()", "Parses a YAML document.", "root = content().parse_yaml()"),
    # Timestamps
    _m("ts_add_iso8601", "timestamp", "ts_add_iso8601(duration)", "Adds an ISO 8601 duration.", 'root.t = this.t.ts_add_iso8601("P1D")'),
    _m("ts_format", "timestamp", "ts_format(format?, tz?)", "Formats a timestamp with a Go layout.", 'root.d = this.t.ts_format("2006-01-02")'),
    _m("ts_parse", "timestamp", "ts_parse(format)", "Parses a timestamp with a Go layout.", 'root.t = this.d.ts_parse("2006-01-02")'),
    _m("ts_strftime", "timestamp", "ts_strftime(format, tz?)", "Formats a timestamp with strftime.", 'root.d = this.t.ts_strftime("%Y-%m-%d")'),
    _m("ts_strptime", "timestamp", "ts_strptime(format)", "Parses a timestamp with strptime.", 'root.t = this.d.ts_strptime("%Y-%m-%d")'),
    _m("ts_tz", "timestamp", "ts_tz(tz)", "Converts a timestamp to a time zone.", 'root.t = this.t.ts_tz("UTC")'),
    _m("ts_unix", "timestamp", "ts_unix()", "Timestamp as Unix seconds.", "root.s = this.t.ts_unix()"),
    _m("ts_unix_micro", "timestamp", "ts_unix_micro()", "Timestamp as Unix microseconds.", "root.us = this.t.ts_unix_micro()"),
    _m("ts_unix_milli", "timestamp", "ts_unix_milli()", "Timestamp as Unix milliseconds.", "root.ms = this.t.ts_unix_milli()"),
    _m("ts_unix_nano", "timestamp", "ts_unix_nano()", "Timestamp as Unix nanoseconds.", "root.ns = this.t.ts_unix_nano()"),
)
# fmt: on

FUNCTION_NAMES: frozenset[str] = frozenset(item.name for item in BLOBLANG_FUNCTIONS)
METHOD_NAMES: frozenset[str] = frozenset(item.name for item in BLOBLANG_METHODS)

_BY_NAME: MappingProxyType[str, BloblangItem] = MappingProxyType(
    {item.name: item for item in BLOBLANG_FUNCTIONS + BLOBLANG_METHODS}
)


def get_bloblang_item(name: str) -> BloblangItem | None:
    """Look up a function or method by exact name."""
    return _BY_NAME.get(name)


def list_bloblang_categories() -> list[str]:
    """All categories, sorted."""
    return sorted({item.category for item in _BY_NAME.values()})


def get_bloblang_by_category(category: str) -> list[BloblangItem]:
    """Items of a category; ``functions``/``methods`` select by kind and ``all`` returns everything."""
    if category == "all":
        return list(BLOBLANG_FUNCTIONS + BLOBLANG_METHODS)
    if category == "functions":
        return list(BLOBLANG_FUNCTIONS)
    if category == "methods":
        return list(BLOBLANG_METHODS)
    return [item for item in BLOBLANG_FUNCTIONS + BLOBLANG_METHODS if item.category == category]


def search_bloblang(query: str) -> list[BloblangItem]:
    """Case-insensitive search over names, signatures and descriptions."""
    needle = query.lower()
    return [
        item
        for item in BLOBLANG_FUNCTIONS + BLOBLANG_METHODS
        if needle in item.name.lower()
        or needle in item.signature.lower()
        or needle in item.description.lower()
    ]


def format_bloblang_reference(items: list[BloblangItem]) -> str:
    """Render items as markdown."""
    lines: list[str] = []
    for item in items:
        call = f".{item.signature}" if item.kind == "method" else item.signature
        lines.append(f"## {item.name}")
        lines.append(f"Type: {item.kind} | Category: {item.category}")
        lines.append(f"Signature: `{call}`")
        lines.append(item.description)
        if item.example:
            lines.append(f"Example: `{item.example}`")
        lines.append("")
    return "\n".join(lines)
