import json
import logging
import time
from pathlib import Path
from typing import List, Optional, TypedDict

from .config import PipelineConfig
from .io_helpers import PathLike, fasta_stats, list_sample_dirs
from .pipeline_steps import (
    ASSEMBLY_FASTA,
    CONFIG_FILE,
    SUMMARY_FILE,
    CommandResult,
    _assemble_sample,
    _check_tools,
    _extract_sequences,
    _parse_logs,
)
from .read_files import SampleError, classify_reads

logger = logging.getLogger(__name__)

ASSEMBLED = "assembled"
FAILED = "failed"
SKIPPED = "skipped"


class SampleResult(TypedDict):
    """
    Outcome of one sample folder. A sample is "skipped" when its reads or output folder
    prevented the assembler from running, and "failed" when the assembler exited with a
    non-zero status. Contig statistics are only filled in for assembled samples.
    """

    sample: str
    status: str
    error: Optional[str]
    exit_code: Optional[int]
    contig_count: int
    longest_contig_length: int
    total_contig_length: int
    circular_contig_count: int


class StepResult(TypedDict):
    step: str
    exit_code: Optional[int]
    ok: bool
    log: Optional[str]


class PipelineSummary(TypedDict):
    """
    Store the outcome of a whole pipeline run. success is True only if every sample was
    assembled and every postprocessing step exited cleanly.
    """

    input_dir: str
    output_dir: str
    total_time: float
    samples: List[SampleResult]
    postprocessing: List[StepResult]
    success: bool


def _empty_sample_result(sample: str, status: str) -> SampleResult:
    return {
        "sample": sample,
        "status": status,
        "error": None,
        "exit_code": None,
        "contig_count": 0,
        "longest_contig_length": 0,
        "total_contig_length": 0,
        "circular_contig_count": 0,
    }


def _process_sample(sample_dir: Path, output_dir: Path, config: PipelineConfig) -> SampleResult:
    """Classify reads and run the assembler for one sample folder.

    Problems confined to the sample are recorded in the result instead of raised, so
    the batch can go on with the next sample.
    """
    name = sample_dir.name
    sample_output = output_dir / name

    try:
        if config.copy_assemblies and name == config.assemblies_dir:
            raise SampleError(
                f"Sample name {name} is reserved for the shared assemblies folder"
            )
        reads = classify_reads(sample_dir)
        reads.require_assemblable(name)
        logger.info(f"Running unicycler with files from folder: {name}")
        command = _assemble_sample(reads, sample_output, config)
    except SampleError as e:
        logger.error(f"Skipping sample {name}: {e}")
        result = _empty_sample_result(name, SKIPPED)
        result["error"] = str(e)
        return result

    if not command.ok:
        logger.error(
            f"unicycler failed for sample {name} with exit code {command.exit_code}; "
            f"see {command.log_path}"
        )
        result = _empty_sample_result(name, FAILED)
        result["exit_code"] = command.exit_code
        result["error"] = f"assembler exited with code {command.exit_code}"
        return result

    result = _empty_sample_result(name, ASSEMBLED)
    result["exit_code"] = command.exit_code
    stats = fasta_stats(sample_output / ASSEMBLY_FASTA)
    result["contig_count"] = stats.contig_count
    result["longest_contig_length"] = stats.longest
    result["total_contig_length"] = stats.total
    result["circular_contig_count"] = stats.circular_count
    logger.debug(f"Assembled {name}: {stats}")
    return result


def _step_result(step: str, command: Optional[CommandResult]) -> Optional[StepResult]:
    if command is None:
        logger.debug(f"{step} disabled")
        return None
    if not command.ok:
        logger.error(f"{step} failed with exit code {command.exit_code}; see {command.log_path}")
    return {
        "step": step,
        "exit_code": command.exit_code,
        "ok": command.ok,
        "log": str(command.log_path),
    }


def _postprocess(output_dir: Path, config: PipelineConfig) -> List[StepResult]:
    """Run the log parser and the fasta extractor over the whole output folder."""
    steps = []

    logger.info("Extracting tables from unicycler.log")
    steps.append(_step_result("log_parser", _parse_logs(output_dir, config)))

    logger.info("Extracting fasta sequences from assembly.fasta")
    steps.append(_step_result("fasta_extractor", _extract_sequences(output_dir, config)))

    if config.copy_assemblies and config.fasta_extractor_cmd():
        shared_dir = output_dir / config.assemblies_dir
        if shared_dir.exists() and (
            not shared_dir.is_dir() or (shared_dir / ASSEMBLY_FASTA).exists()
        ):
            # A file, or a sample's assembly output, is in the way
            logger.error(f"Cannot use {shared_dir} as the shared assemblies folder")
            steps.append(
                {"step": "fasta_extractor_shared", "exit_code": None, "ok": False, "log": None}
            )
        else:
            shared_dir.mkdir(exist_ok=True)
            steps.append(
                _step_result(
                    "fasta_extractor_shared",
                    _extract_sequences(output_dir, config, dest_dir=shared_dir),
                )
            )

    return [s for s in steps if s is not None]


def unicycler_pipeline(
    input_dir: PathLike,
    output_dir: PathLike,
    config: Optional[PipelineConfig] = None,
) -> PipelineSummary:
    """Assemble every sample folder in input_dir with Unicycler, then summarize the runs.

    Each subfolder of input_dir holds the Illumina and ONP reads of one sample and gets
    a subfolder of the same name in output_dir. Samples run one at a time in name
    order. After all samples, the log parser writes assemblies_summary.csv and
    molecules_summary.csv to output_dir, and the fasta extractor splits each
    assembly.fasta into one file per molecule, optionally copying them all into a
    shared folder.

    Args:
        input_dir: Folder with one subfolder of reads per sample
        output_dir: Existing folder that receives one subfolder per sample
        config: Tools and parameters; defaults to PipelineConfig()
    Returns:
        PipelineSummary: Per-sample and per-step outcomes, also written to
            output_dir/pipeline_summary.json
    Raises:
        ValueError: If input_dir or output_dir is not an existing directory
        ToolNotFoundError: If a configured program is not on PATH
    """
    if config is None:
        config = PipelineConfig()
    input_dir = Path(input_dir)
    output_dir = Path(output_dir)
    if not input_dir.is_dir():
        raise ValueError(f"input_folder {input_dir} does not exist")
    if not output_dir.is_dir():
        raise ValueError(f"output_folder {output_dir} does not exist")
    _check_tools(config)

    start_time = time.time()
    config.write_config(output_dir / CONFIG_FILE)

    logger.info("Running unicycler")
    samples = [
        _process_sample(sample_dir, output_dir, config)
        for sample_dir in list_sample_dirs(input_dir)
    ]
    if not samples:
        logger.warning(f"No sample folders found in {input_dir}")

    postprocessing = _postprocess(output_dir, config)

    summary: PipelineSummary = {
        "input_dir": str(input_dir),
        "output_dir": str(output_dir),
        "total_time": time.time() - start_time,
        "samples": samples,
        "postprocessing": postprocessing,
        "success": all(s["status"] == ASSEMBLED for s in samples)
        and all(s["ok"] for s in postprocessing),
    }

    with open(output_dir / SUMMARY_FILE, "w") as f:
        json.dump(summary, f, indent=2)

    failed = [s["sample"] for s in samples if s["status"] != ASSEMBLED]
    if failed:
        logger.error(f"{len(failed)} of {len(samples)} samples were not assembled: {failed}")
    logger.info("unicycler_pipeline is done!")
    return summary
