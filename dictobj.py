"""dictobj entrypoint module exposing the public API and CLI."""

import argparse
import logging
import os
import sys

from dictobj_lang import (
    ConsoleIO,
    DictObjError,
    TabulaInterpreter,
    UserFunction,
    load_config,
    make_parser,
    to_text,
)

__all__ = ["run_repl", "run_file", "main"]

logger = logging.getLogger("dictobj")


def run_repl(interpreter: TabulaInterpreter) -> None:
    interpreter.io.emit("Tabula interactive session. Type 'exit' to leave.")
    parser = make_parser("statement")
    while True:
        text = interpreter.io.read_input(">> ").strip()
        if not text:
            continue
        if text in ("exit", "quit"):
            break
        try:
            result = interpreter.visit(parser.parse(text))
        except Exception as e:
            interpreter.io.emit(f"Error: {e}")
            continue
        if result is not None:
            interpreter.io.emit(f"=> {to_text(result, nested=True)}")


def run_file(interpreter: TabulaInterpreter, path: str) -> None:
    with open(path, "r", encoding="utf-8") as f:
        source = f.read()
    logger.info("running %s", path)
    interpreter.execute(source)
    main_func = interpreter.globals.bindings.get("main")
    if isinstance(main_func, UserFunction) and not main_func.params:
        interpreter.invoke(main_func, [])


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tabula dictionary-object interpreter")
    parser.add_argument("script", nargs="?", help="Path to a .tab script")
    parser.add_argument("--config", help="TOML file with a [runtime] table")
    parser.add_argument("--max-recursion", type=int, help="Maximum script call depth")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(
            args.config, max_recursion=args.max_recursion, log_level=args.log_level
        )
    except DictObjError as e:
        print(f"FATAL ERROR\n{e}")
        sys.exit(1)

    logging.basicConfig(
        level=config.logging_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    interpreter = TabulaInterpreter(config=config, io_handler=ConsoleIO())

    if not args.script:
        run_repl(interpreter)
        return

    try:
        run_file(interpreter, os.path.abspath(args.script))
    except Exception as e:
        logger.debug("script failed", exc_info=True)
        print(f"FATAL ERROR\n{e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
