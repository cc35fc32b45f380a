"""
C Toolchain Integration
=======================

Builds and runs the C code produced by the compiler using the platform
C compiler (gcc by default).

    C source → output.c → cc → output binary → run → captured stdout

The toolchain never looks inside compiler diagnostics; it relays them.

Configuration can come from:
- Default values (defined here)
- Environment variables (ToolchainConfig.from_env)
- Explicit arguments (the cccp command line)

Environment Variables
---------------------
CCCP_CC       C compiler executable (default: gcc)
CCCP_CFLAGS   Extra compiler flags, shell-quoted (default: -std=c99)
CCCP_TIMEOUT  Seconds allowed for each compile and run (default: none)
CCCP_WORK_DIR Directory for output.c and the binary (default: a temp dir)
"""

import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from cccp.errors import ToolchainError

logger = logging.getLogger(__name__)

C_FILENAME = "output.c"
BINARY_NAME = "output.exe" if os.name == "nt" else "output"


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class ToolchainConfig:
    """
    Configuration for building and running generated C.

    Attributes:
        cc: C compiler executable
        cflags: Flags passed to the compiler before the source file
        timeout: Seconds allowed for each compile and each run (None = no limit)
        work_dir: Where to write output.c and the binary (None = temp dir)
        keep_files: Keep the temporary directory after compile_and_run
    """
    cc: str = "gcc"
    cflags: tuple[str, ...] = ("-std=c99",)
    timeout: Optional[float] = None
    work_dir: Optional[Path] = None
    keep_files: bool = False

    @classmethod
    def from_env(cls) -> "ToolchainConfig":
        """
        Create ToolchainConfig from environment variables.

        Invalid values are logged and ignored.
        """
        config = cls()

        if cc := os.environ.get("CCCP_CC"):
            config.cc = cc

        if cflags := os.environ.get("CCCP_CFLAGS"):
            config.cflags = tuple(shlex.split(cflags))

        if timeout := os.environ.get("CCCP_TIMEOUT"):
            try:
                config.timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid CCCP_TIMEOUT value: {timeout!r}")

        if work_dir := os.environ.get("CCCP_WORK_DIR"):
            config.work_dir = Path(work_dir)

        return config


# =============================================================================
# Results
# =============================================================================

@dataclass
class BuildResult:
    """
    Result of compiling C source.

    Attributes:
        success: True if the compiler exited with status 0
        binary: Path of the produced executable (if successful)
        c_path: Path of the C file that was compiled
        command: The compiler command line
        output: Combined compiler stdout/stderr
    """
    success: bool
    binary: Optional[Path] = None
    c_path: Optional[Path] = None
    command: list[str] = field(default_factory=list)
    output: str = ""


@dataclass
class RunResult:
    """
    Result of running a compiled program.

    Attributes:
        success: True if the program exited with status 0 in time
        stdout: Captured standard output
        stderr: Captured standard error
        returncode: Exit status (None if the program timed out)
        timed_out: True if the configured timeout was reached
    """
    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    timed_out: bool = False


@dataclass
class ExecutionResult:
    """Result of compile_and_run: the build, and the run if the build succeeded."""
    build: BuildResult
    run: Optional[RunResult] = None

    @property
    def success(self) -> bool:
        return self.build.success and self.run is not None and self.run.success

    @property
    def stdout(self) -> str:
        return self.run.stdout if self.run else ""


# =============================================================================
# Toolchain
# =============================================================================

class CToolchain:
    """
    Compiles and runs C source with an external C compiler.

    Example:
        toolchain = CToolchain()
        result = toolchain.compile_and_run(c_source)
        if result.success:
            print(result.stdout, end="")
    """

    def __init__(self, config: Optional[ToolchainConfig] = None):
        self.config = config or ToolchainConfig()

    def build(self, c_source: str, work_dir: Path) -> BuildResult:
        """
        Write c_source to work_dir/output.c and compile it.

        Returns:
            BuildResult; an ordinary compile failure is success=False

        Raises:
            ToolchainError: If the compiler cannot be started
        """
        work_dir = Path(work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)
        c_path = work_dir / C_FILENAME
        binary = work_dir / BINARY_NAME
        c_path.write_text(c_source, encoding="utf-8")

        cmd = [self.config.cc, *self.config.cflags, str(c_path), "-o", str(binary)]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except FileNotFoundError:
            raise ToolchainError(
                f"C compiler '{self.config.cc}' not found - is it installed and on PATH?",
                command=cmd,
            )
        except PermissionError:
            raise ToolchainError(
                f"C compiler '{self.config.cc}' is not executable",
                command=cmd,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"C compiler timed out after {self.config.timeout}s")
            return BuildResult(
                success=False,
                c_path=c_path,
                command=cmd,
                output=f"compilation timed out after {self.config.timeout}s",
            )

        output = proc.stdout + proc.stderr
        if proc.returncode != 0:
            logger.warning(f"C compiler exited with status {proc.returncode}")
            return BuildResult(success=False, c_path=c_path, command=cmd, output=output)

        return BuildResult(
            success=True,
            binary=binary,
            c_path=c_path,
            command=cmd,
            output=output,
        )

    def run(self, binary: Path) -> RunResult:
        """
        Execute a compiled program and capture its output.

        A program that exceeds the configured timeout is reported as
        unsuccessful with whatever output it produced.
        """
        cmd = [str(binary)]
        logger.debug(f"Running: {cmd[0]}")

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Program timed out after {self.config.timeout}s")
            return RunResult(
                success=False,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
                timed_out=True,
            )
        except OSError as e:
            raise ToolchainError(f"cannot execute {binary}: {e}", command=cmd)

        if proc.returncode != 0:
            logger.warning(f"Program exited with status {proc.returncode}")

        return RunResult(
            success=proc.returncode == 0,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )

    def compile_and_run(self, c_source: str) -> ExecutionResult:
        """
        Build c_source and, if that succeeds, run it.

        Uses config.work_dir when set; otherwise a temporary directory
        that is removed afterwards unless config.keep_files is set.
        """
        if self.config.work_dir is not None:
            return self._build_and_run(c_source, Path(self.config.work_dir))

        if self.config.keep_files:
            work_dir = Path(tempfile.mkdtemp(prefix="cccp_"))
            logger.info(f"Keeping build files in {work_dir}")
            return self._build_and_run(c_source, work_dir)

        with tempfile.TemporaryDirectory(prefix="cccp_") as temp_dir:
            return self._build_and_run(c_source, Path(temp_dir))

    def _build_and_run(self, c_source: str, work_dir: Path) -> ExecutionResult:
        build = self.build(c_source, work_dir)
        if not build.success:
            return ExecutionResult(build=build)
        return ExecutionResult(build=build, run=self.run(build.binary))


def _as_text(data) -> str:
    """Partial output from TimeoutExpired may be bytes, str or None."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
