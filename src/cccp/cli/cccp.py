"""
cccp - Command-Line Interface
=============================

Compiles a CCCP source file to C, builds it with the platform C
compiler, runs the program and relays its output.

Usage Examples
--------------
Compile and run:
    $ cccp hello.cccp

Show the generated C:
    $ cccp hello.cccp --emit-c

Keep the C file:
    $ cccp hello.cccp -o hello.c

Show the parsed AST:
    $ cccp hello.cccp --ast

Verbose mode with a debug log:
    $ cccp -v --debug-log debug.log hello.cccp
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click

from cccp import __version__
from cccp.cli.errors import ExitCode, handle_cli_exception
from cccp.lang import CCCPCompiler, CompilerOptions, ASTPrinter, Lexer, Parser
from cccp.toolchain import CToolchain, ToolchainConfig

logger = logging.getLogger(__name__)

# File written when CCCP_DEBUG is set and --debug-log is not given
DEFAULT_DEBUG_LOG = "debug.log"


def setup_logging(verbose: bool, debug_log: Optional[Path]) -> None:
    """Configure logging based on verbosity and the optional debug log file."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )

    if debug_log is not None:
        handler = logging.FileHandler(debug_log, mode="w", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s: %(message)s"
        ))
        package_logger = logging.getLogger("cccp")
        package_logger.setLevel(logging.DEBUG)
        package_logger.addHandler(handler)


def _debug_log_path(debug_log: Optional[Path]) -> Optional[Path]:
    if debug_log is not None:
        return debug_log
    if os.environ.get("CCCP_DEBUG"):
        return Path(DEFAULT_DEBUG_LOG)
    return None


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the generated C to this file",
)
@click.option(
    "--emit-c",
    is_flag=True,
    help="Print the generated C and exit without building",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--cc",
    default=None,
    help="C compiler to use (default: $CCCP_CC or gcc)",
)
@click.option(
    "-k", "--keep",
    is_flag=True,
    help="Keep the temporary build directory",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.option(
    "--debug-log",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Write a debug log to this file (CCCP_DEBUG=1 writes {DEFAULT_DEBUG_LOG})",
)
@click.version_option(version=__version__, prog_name="cccp")
def main(
    source: Path,
    output: Optional[Path],
    emit_c: bool,
    ast: bool,
    cc: Optional[str],
    keep: bool,
    verbose: bool,
    debug_log: Optional[Path],
) -> None:
    """
    Compile and run a CCCP program.

    SOURCE is the program file to compile.

    The program is translated to C, compiled with the platform C
    compiler, and run; its output is printed.

    \b
    Examples:
        cccp hello.cccp              # Compile and run
        cccp hello.cccp --emit-c     # Print the generated C
        cccp hello.cccp -o hello.c   # Also save the C source
        cccp hello.cccp --ast        # Print the parsed AST
    """
    setup_logging(verbose, _debug_log_path(debug_log))

    try:
        text = source.read_text(encoding="utf-8")

        if ast:
            parser = Parser(Lexer(text, str(source)))
            click.echo(ASTPrinter().print(parser.parse()))
            return

        compiler = CCCPCompiler(CompilerOptions(filename=str(source)))
        result = compiler.compile_source(text)

        if output is not None:
            output.write_text(result.c_source, encoding="utf-8")
            logger.info(f"Wrote {len(result.c_source)} bytes to {output}")

        if emit_c:
            click.echo(result.c_source, nl=False)
            return

        config = ToolchainConfig.from_env()
        if cc:
            config.cc = cc
        if keep:
            config.keep_files = True

        execution = CToolchain(config).compile_and_run(result.c_source)

        if not execution.build.success:
            click.echo("C compilation failed:", err=True)
            click.echo(execution.build.output, err=True, nl=False)
            sys.exit(ExitCode.BUILD_ERROR)

        run = execution.run
        click.echo(run.stdout, nl=False)
        if run.stderr:
            click.echo(run.stderr, err=True, nl=False)

        if run.timed_out:
            click.echo("Program timed out", err=True)
            sys.exit(ExitCode.BUILD_ERROR)
        if not run.success:
            click.echo(f"Program exited with status {run.returncode}", err=True)
            sys.exit(ExitCode.BUILD_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Toolchain")


if __name__ == "__main__":
    main()
