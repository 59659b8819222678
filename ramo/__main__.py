import argparse
import sys

from ramo.app import RamoApp, configure_logging
from ramo.core.config import load_config
from ramo.core.errors import ParseError
from ramo.core.export import dump_forest
from ramo.managers import load_manifest


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ramo",
        description="Explore the dependency tree of a package.json, requirements.txt or pom.xml.",
    )
    parser.add_argument("manifest", help="path to the manifest file")
    parser.add_argument("--export", metavar="FILE", help="write the tree as JSON and exit")
    parser.add_argument("--config", metavar="FILE", help="TOML settings file (default: ./ramo.toml)")
    return parser


def main(argv=None) -> int:
    """ Entrypoint when is installed via pip """
    args = build_arg_parser().parse_args(argv)
    config = load_config(args.config)

    if args.export:
        try:
            _, forest = load_manifest(args.manifest, config=config)
        except ParseError as e:
            print(f"ramo: {e.message}", file=sys.stderr)
            return 1
        except (OSError, UnicodeDecodeError) as e:
            print(f"ramo: cannot read {args.manifest}: {e}", file=sys.stderr)
            return 1

        with open(args.export, "w", encoding="utf-8") as f:
            dump_forest(forest, f)
        return 0

    configure_logging(config)
    app = RamoApp(args.manifest, config=config)
    app.run()
    return 0


# Development mode
if __name__ == "__main__":
    sys.exit(main())
