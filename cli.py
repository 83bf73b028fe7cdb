from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from bundler.config import BuildConfig, load_config
from bundler.errors import BuildError
from bundler.log import setup_logging
from bundler.pipeline import build_bundle, load_graph
from bundler.summarize import summarize_build


def _config_from_args(args: argparse.Namespace) -> BuildConfig:
	overrides = {
		"entry": args.entry,
		"output": args.out,
		"externals": args.external,
		"exclude": args.exclude,
		"cycles": "error" if args.strict_cycles else None,
	}
	return load_config(args.config, args.root, overrides)


def cmd_build(args: argparse.Namespace) -> None:
	config = _config_from_args(args)
	result = build_bundle(config)
	print(summarize_build(result))


def cmd_graph(args: argparse.Namespace) -> None:
	config = _config_from_args(args)
	graph, entry = load_graph(config)
	report = graph.report(entry, config.cycles)
	print(json.dumps(report.model_dump(), indent=2))


def _add_common(p: argparse.ArgumentParser) -> None:
	p.add_argument("--config", help="Path to a JSON build config (default: bundle.config.json in the root)")
	p.add_argument("--root", help="Project root directory")
	p.add_argument("--entry", help="Entry module, relative to the root")
	p.add_argument("--out", help="Bundle output path, relative to the root")
	p.add_argument("--external", action="append", default=[], help="Import specifier provided by the host")
	p.add_argument("--exclude", action="append", default=[], help="Module path to leave out of the bundle")
	p.add_argument("--strict-cycles", action="store_true", help="Fail on cyclic local imports")
	verbosity = p.add_mutually_exclusive_group()
	verbosity.add_argument("-v", "--verbose", action="store_true")
	verbosity.add_argument("-q", "--quiet", action="store_true")


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="tsbundle")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pb = sub.add_parser("build", help="Flatten the project into one script and extract strings")
	_add_common(pb)
	pb.set_defaults(func=cmd_build)

	pg = sub.add_parser("graph", help="Print the module order and dependency edges as JSON")
	_add_common(pg)
	pg.set_defaults(func=cmd_graph)

	args = parser.parse_args(argv)
	setup_logging("DEBUG" if args.verbose else "WARNING" if args.quiet else "INFO")
	try:
		args.func(args)
	except BuildError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
