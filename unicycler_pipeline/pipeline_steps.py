import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional

from .config import PipelineConfig
from .io_helpers import PathLike, normalize_dir_path
from .read_files import SampleError, SampleReads

# File names used across functions
ASSEMBLY_FASTA = "assembly.fasta"
UNICYCLER_LOG = "unicycler.log"
ASSEMBLIES_SUMMARY = "assemblies_summary.csv"
MOLECULES_SUMMARY = "molecules_summary.csv"
SAMPLE_LOG_FILE = "pipeline.log"
POSTPROCESSING_LOG_FILE = "postprocessing.log"
SUMMARY_FILE = "pipeline_summary.json"
CONFIG_FILE = "pipeline_config.yaml"

# Shell conventions for "command not found" and "not executable"
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

logger = logging.getLogger(__name__)


class ToolNotFoundError(RuntimeError):
    pass


class OutputExistsError(SampleError):
    pass


class CommandResult(NamedTuple):
    args: List[str]
    exit_code: int
    log_path: Path

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def _run_command(args: List[str], log_path: PathLike) -> CommandResult:
    """Run an external program to completion, appending its output to a log file.

    Never raises on failure: a non-zero exit is returned in the result, and an
    executable that cannot be started is reported with the shell's exit codes (127
    for not found, 126 for not executable).

    Args:
        args: Program and arguments
        log_path: File that receives stdout and stderr of the program

    Returns:
        CommandResult with the exit code of the program
    """
    log_path = Path(log_path)
    args = [str(a) for a in args]
    logger.debug(f"Running: {' '.join(args)}")
    with open(log_path, "a") as log:
        log.write(f"$ {' '.join(args)}\n")
        log.flush()
        try:
            result = subprocess.run(args, stdout=log, stderr=log)
            exit_code = result.returncode
        except FileNotFoundError as e:
            log.write(f"{e}\n")
            exit_code = EXIT_NOT_FOUND
        except PermissionError as e:
            log.write(f"{e}\n")
            exit_code = EXIT_NOT_EXECUTABLE
        except OSError as e:
            # e.g. ENOEXEC for a script without a shebang line
            logger.error(f"Could not start {args[0]}: {e}")
            log.write(f"{e}\n")
            exit_code = EXIT_NOT_EXECUTABLE
    return CommandResult(args, exit_code, log_path)


def _check_tools(config: PipelineConfig) -> None:
    """Make sure every configured program can be found before any work starts."""
    for name, cmd in [
        ("assembler", config.assembler_cmd()),
        ("log parser", config.log_parser_cmd()),
        ("fasta extractor", config.fasta_extractor_cmd()),
    ]:
        if not cmd:
            continue
        if shutil.which(cmd[0]) is None:
            raise ToolNotFoundError(f"{name} {cmd[0]} not found in PATH")


def _assembler_command(
    reads: SampleReads, output_dir: PathLike, config: PipelineConfig
) -> List[str]:
    """Unicycler command line for one sample. Read roles that are absent are left out
    of the command rather than passed as empty arguments."""
    cmd = config.assembler_cmd()
    if reads.forward is not None:
        cmd += ["-1", str(reads.forward)]
    if reads.reverse is not None:
        cmd += ["-2", str(reads.reverse)]
    if reads.long is not None:
        cmd += ["-l", str(reads.long)]
    # fmt: off
    cmd += [
        "-t", str(config.threads),
        "--mode", config.mode,
        "-o", str(output_dir),
    ]
    # fmt: on
    return cmd


def _assemble_sample(
    reads: SampleReads, output_dir: PathLike, config: PipelineConfig
) -> CommandResult:
    """Assemble one sample into a new output directory.

    The output directory must not exist yet; earlier runs are never resumed or
    overwritten. Assembler output goes to <output_dir>/pipeline.log.

    Args:
        reads: Classified read files of the sample
        output_dir: Directory to create for the assembly
        config: Pipeline configuration

    Returns:
        CommandResult of the assembler run

    Raises:
        OutputExistsError: If output_dir already exists
    """
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir()
    except FileExistsError as e:
        raise OutputExistsError(f"Output folder already exists: {output_dir}") from e

    cmd = _assembler_command(reads, output_dir, config)
    return _run_command(cmd, output_dir / SAMPLE_LOG_FILE)


def _parse_logs(output_dir: PathLike, config: PipelineConfig) -> Optional[CommandResult]:
    """Build assemblies_summary.csv and molecules_summary.csv from all unicycler.log
    files under output_dir. Returns None if the log parser is disabled."""
    parser_cmd = config.log_parser_cmd()
    if not parser_cmd:
        return None
    output_dir = normalize_dir_path(output_dir)
    # fmt: off
    cmd = parser_cmd + [
        "-i", output_dir,
        "-o", output_dir,
    ]
    # fmt: on
    return _run_command(cmd, Path(output_dir) / POSTPROCESSING_LOG_FILE)


def _extract_sequences(
    output_dir: PathLike, config: PipelineConfig, dest_dir: Optional[PathLike] = None
) -> Optional[CommandResult]:
    """Split each sample's assembly.fasta into one fasta per molecule.

    Without dest_dir the extracted files are written next to each assembly.fasta.
    Returns None if the fasta extractor is disabled.
    """
    extractor_cmd = config.fasta_extractor_cmd()
    if not extractor_cmd:
        return None
    output_dir = normalize_dir_path(output_dir)
    cmd = extractor_cmd + ["-i", output_dir, ASSEMBLY_FASTA]
    if dest_dir is not None:
        cmd += ["-o", normalize_dir_path(dest_dir)]
    return _run_command(cmd, Path(output_dir) / POSTPROCESSING_LOG_FILE)
