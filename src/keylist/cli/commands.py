"""CLI command registration and handlers for keylist documents."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from keylist.contracts.error import BadInputError, Exit
from keylist.core import HashKeylist
from keylist.io.wire import hashable_key


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    load_keylist: Callable[..., HashKeylist]
    save_keylist: Callable[[HashKeylist, str], None]
    logger: logging.Logger
    json_enabled: Callable[[], bool]
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def parse_literal(text: str) -> Any:
    """Read a CLI token as a JSON literal, falling back to the raw string."""

    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return text
    return value


def parse_key(text: str) -> Any:
    """Like :func:`parse_literal`, but arrays become tuples so the key is hashable.

    A top-level JSON object is kept as its raw text.
    """

    value = parse_literal(text)
    if isinstance(value, dict):
        return text
    return hashable_key(value)


def _render(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _add_file(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--file", required=True, help="Path to the JSON keylist document")


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        _add_file(parser)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register("push", "Append a pair (creates the document if missing).", lambda p: _configure_push(p, ctx))
    _register("insert", "Insert a pair at a global position.", lambda p: _configure_insert(p, ctx))
    _register("pop", "Remove and print the last pair.", lambda p: _configure_pop(p, ctx))
    _register("remove", "Remove and print the pair at a global position.", lambda p: _configure_remove(p, ctx))
    _register("get", "Print the first value stored under a key.", lambda p: _configure_get(p, ctx))
    _register("get-all", "Print every value stored under a key.", lambda p: _configure_get_all(p, ctx))
    _register("items", "Print all pairs in order.", lambda p: _configure_items(p, ctx))
    _register("keys", "Print the key sequence.", lambda p: _configure_keys(p, ctx))
    _register("values", "Print all values in order.", lambda p: _configure_values(p, ctx))
    _register("len", "Print the number of pairs.", lambda p: _configure_len(p, ctx))
    _register("sort", "Sort keys, then each key's values.", lambda p: _configure_sort(p, ctx, values=True))
    _register(
        "sort-by-key",
        "Sort the key sequence only; per-key value order is kept.",
        lambda p: _configure_sort(p, ctx, values=False),
    )
    _register("check", "Verify the document loads into a consistent keylist.", lambda p: _configure_check(p, ctx))
    return handlers


def _configure_push(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")
    parser.add_argument("value")

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file, missing_ok=True)
        key, value = parse_key(args.key), parse_literal(args.value)
        keylist.push(key, value)
        ctx.save_keylist(keylist, args.file)
        ctx.logger.info("push %r -> %s (len=%d)", key, args.file, len(keylist))
        ctx.emit_success("push", text="OK", data={"key": key, "value": value, "len": len(keylist)})
        return int(Exit.OK)

    return handler


def _configure_insert(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("index", type=int)
    parser.add_argument("key")
    parser.add_argument("value")

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file, missing_ok=True)
        key, value = parse_key(args.key), parse_literal(args.value)
        keylist.insert(args.index, key, value)
        ctx.save_keylist(keylist, args.file)
        ctx.logger.info("insert %r at %d -> %s", key, args.index, args.file)
        data = {"index": args.index, "key": key, "value": value, "len": len(keylist)}
        ctx.emit_success("insert", text="OK", data=data)
        return int(Exit.OK)

    return handler


def _configure_pop(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        popped = keylist.pop()
        if popped is None:
            ctx.emit_success("pop", text="", data={"found": False, "key": None, "value": None})
            return int(Exit.OK)
        ctx.save_keylist(keylist, args.file)
        key, value = popped
        ctx.emit_success("pop", text=_render([key, value]), data={"found": True, "key": key, "value": value})
        return int(Exit.OK)

    return handler


def _configure_remove(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("index", type=int)

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        key, value = keylist.remove(args.index)
        ctx.save_keylist(keylist, args.file)
        data = {"index": args.index, "key": key, "value": value, "len": len(keylist)}
        ctx.emit_success("remove", text=_render([key, value]), data=data)
        return int(Exit.OK)

    return handler


def _configure_get(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        key = parse_key(args.key)
        found = key in keylist
        value = keylist.get(key)
        text = _render(value) if found else ""
        ctx.emit_success("get", text=text, data={"key": key, "found": found, "value": value})
        return int(Exit.OK)

    return handler


def _configure_get_all(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        key = parse_key(args.key)
        values = keylist.get_all(key) or []
        ctx.emit_success(
            "get-all",
            text=_render(values),
            data={"key": key, "found": bool(values), "values": values},
        )
        return int(Exit.OK)

    return handler


def _configure_items(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        pairs = [[key, value] for key, value in keylist.iter()]
        if ctx.json_enabled():
            ctx.emit_success("items", data={"items": pairs, "count": len(pairs)})
        else:
            for pair in pairs:
                print(_render(pair))
        return int(Exit.OK)

    return handler


def _configure_keys(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        keys = list(ctx.load_keylist(args.file).keys())
        ctx.emit_success("keys", text=_render(keys), data={"keys": keys})
        return int(Exit.OK)

    return handler


def _configure_values(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        values = list(ctx.load_keylist(args.file).values())
        ctx.emit_success("values", text=_render(values), data={"values": values})
        return int(Exit.OK)

    return handler


def _configure_len(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        size = len(ctx.load_keylist(args.file, missing_ok=True))
        ctx.emit_success("len", text=str(size), data={"len": size})
        return int(Exit.OK)

    return handler


def _configure_sort(
    parser: argparse.ArgumentParser, ctx: CLIContext, *, values: bool
) -> Callable[[argparse.Namespace], int]:
    del parser
    command = "sort" if values else "sort-by-key"

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        try:
            if values:
                keylist.sort()
            else:
                keylist.sort_by_key()
        except TypeError as exc:
            raise BadInputError(f"Cannot sort: {exc}", hint="keys (and values for `sort`) must be comparable") from exc
        ctx.save_keylist(keylist, args.file)
        ctx.logger.info("%s %s (%d pairs)", command, args.file, len(keylist))
        ctx.emit_success(command, text="OK", data={"len": len(keylist)})
        return int(Exit.OK)

    return handler


def _configure_check(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    del parser

    def handler(args: argparse.Namespace) -> int:
        keylist = ctx.load_keylist(args.file)
        keylist.check_invariants()
        distinct = len(set(keylist.keys()))
        ctx.emit_success(
            "check",
            text=f"OK: {len(keylist)} pairs, {distinct} distinct keys",
            data={"len": len(keylist), "distinct_keys": distinct},
        )
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "parse_key", "parse_literal", "register_subcommands"]
