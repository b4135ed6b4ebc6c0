import stat
import textwrap
from pathlib import Path

import pytest

from unicycler_pipeline.config import PipelineConfig

FASTQ_RECORD = "@read1\nACGTACGTAC\n+\nIIIIIIIIII\n"

# Stand-ins for unicycler, log_parser.py and fasta_extractor.py that only touch the
# files the pipeline cares about.
FAKE_UNICYCLER = textwrap.dedent(
    """\
    #!/bin/sh
    all="$*"
    out=""
    while [ $# -gt 0 ]; do
      case "$1" in
        -o) out="$2"; shift 2;;
        *) shift;;
      esac
    done
    printf '%s\\n' "$all" > "$out/args.txt"
    printf '>1 length=10 depth=1.00x circular=true\\nACGTACGTAC\\n>2 length=4 depth=2.10x\\nACGT\\n' > "$out/assembly.fasta"
    echo "Unicycler finished" > "$out/unicycler.log"
    """
)

FAKE_LOG_PARSER = textwrap.dedent(
    """\
    #!/bin/sh
    out=""
    while [ $# -gt 0 ]; do
      case "$1" in
        -o) out="$2"; shift 2;;
        *) shift;;
      esac
    done
    echo "sample,contigs" > "${out}assemblies_summary.csv"
    echo "sample,molecule" > "${out}molecules_summary.csv"
    exit 0
    """
)

FAKE_FASTA_EXTRACTOR = textwrap.dedent(
    """\
    #!/bin/sh
    in=""
    name=""
    dest=""
    while [ $# -gt 0 ]; do
      case "$1" in
        -i) in="$2"; name="$3"; shift 3;;
        -o) dest="$2"; shift 2;;
        *) shift;;
      esac
    done
    for d in "$in"*/; do
      [ -f "$d$name" ] || continue
      sample=$(basename "$d")
      target="${dest:-$d}"
      cp "$d$name" "$target${sample}_10_circular.fasta"
    done
    exit 0
    """
)

FAILING_TOOL = "#!/bin/sh\necho 'something went wrong' >&2\nexit 3\n"


def write_executable(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def make_sample():
    """Factory creating a sample folder with a small fastq file for each filename."""

    def _make_sample(input_dir: Path, name: str, filenames) -> Path:
        sample_dir = input_dir / name
        sample_dir.mkdir(parents=True)
        for filename in filenames:
            (sample_dir / filename).write_text(FASTQ_RECORD)
        return sample_dir

    return _make_sample


@pytest.fixture
def fake_bin(tmp_path):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    write_executable(bin_dir / "unicycler", FAKE_UNICYCLER)
    write_executable(bin_dir / "log_parser", FAKE_LOG_PARSER)
    write_executable(bin_dir / "fasta_extractor", FAKE_FASTA_EXTRACTOR)
    write_executable(bin_dir / "failing_tool", FAILING_TOOL)
    # executable but not startable: exec fails with ENOEXEC
    write_executable(bin_dir / "no_shebang", "echo hi\n")
    return bin_dir


@pytest.fixture
def fake_config(fake_bin):
    return PipelineConfig(
        assembler=str(fake_bin / "unicycler"),
        log_parser=str(fake_bin / "log_parser"),
        fasta_extractor=str(fake_bin / "fasta_extractor"),
    )


@pytest.fixture
def input_dir(tmp_path):
    d = tmp_path / "input"
    d.mkdir()
    return d


@pytest.fixture
def output_dir(tmp_path):
    d = tmp_path / "output"
    d.mkdir()
    return d
