import os
from pathlib import Path
from typing import List, NamedTuple

import yaml
from Bio import SeqIO

PathLike = str | Path


class FastaStats(NamedTuple):
    contig_count: int
    longest: int
    total: int
    circular_count: int


def normalize_dir_path(path: PathLike) -> str:
    """Return path as a string ending in exactly one path separator.

    Paths that already end with a separator are returned unchanged, so the
    operation is idempotent."""
    path = str(path)
    if not path.endswith(os.sep):
        path = path + os.sep
    return path


def list_sample_dirs(input_dir: PathLike) -> List[Path]:
    """Non-hidden subdirectories of input_dir, sorted by name."""
    input_dir = Path(input_dir)
    return sorted(
        d for d in input_dir.iterdir() if d.is_dir() and not d.name.startswith(".")
    )


def list_files(dir: PathLike) -> List[Path]:
    """Non-hidden regular files directly inside dir, sorted by name."""
    dir = Path(dir)
    return sorted(f for f in dir.iterdir() if f.is_file() and not f.name.startswith("."))


def load_config(yaml_path):
    with open(yaml_path, "r") as file:
        config = yaml.safe_load(file)
    return config or {}


def _is_circular(description: str) -> bool:
    # Unicycler headers look like ">1 length=4000000 depth=1.00x circular=true"
    return "circular=true" in description.split()


def fasta_stats(path: PathLike) -> FastaStats:
    """Contig count, longest and total length, and number of circular contigs
    in a fasta file. Missing files count as empty.

    Args:
        path: Path to fasta file

    Returns:
        Named tuple of contig statistics
    """
    path = Path(path)
    if not path.is_file():
        return FastaStats(0, 0, 0, 0)

    lengths = []
    circular = 0
    for rec in SeqIO.parse(path, "fasta"):
        lengths.append(len(rec.seq))
        if _is_circular(rec.description):
            circular += 1
    if lengths:
        return FastaStats(len(lengths), max(lengths), sum(lengths), circular)
    return FastaStats(0, 0, 0, 0)
