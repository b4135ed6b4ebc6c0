import logging
from enum import Enum
from pathlib import Path
from typing import Dict, NamedTuple, Optional

from .io_helpers import PathLike, list_files

logger = logging.getLogger(__name__)


class ReadRole(str, Enum):
    """
    Role a read file plays in a hybrid assembly: forward or reverse Illumina reads, or
    long ONP reads.
    """

    FORWARD = "forward"
    REVERSE = "reverse"
    LONG = "long"


# Filenames are split on their last "-"; the remainder identifies the role, e.g.
# SW0001_S1-1.fastq.gz is a forward read and SW0001-L1000.fastq is a long read.
ROLE_KEYS: Dict[str, ReadRole] = {
    "1.fastq": ReadRole.FORWARD,
    "1.fastq.gz": ReadRole.FORWARD,
    "2.fastq": ReadRole.REVERSE,
    "2.fastq.gz": ReadRole.REVERSE,
    "L1000.fastq": ReadRole.LONG,
    "L1000.fastq.gz": ReadRole.LONG,
}


class SampleError(ValueError):
    """A sample folder that cannot be assembled. Fails that sample only."""


class AmbiguousReadsError(SampleError):
    pass


class MissingReadsError(SampleError):
    pass


class SampleReads(NamedTuple):
    forward: Optional[Path] = None
    reverse: Optional[Path] = None
    long: Optional[Path] = None

    def has_short_reads(self) -> bool:
        return self.forward is not None and self.reverse is not None

    def require_assemblable(self, sample_name: str) -> None:
        """Check these reads are enough for an assembly.

        Short reads must come as a forward/reverse pair. Either the pair or the long
        reads may be absent, in which case the assembly is long-read-only or
        short-read-only respectively.

        Raises:
            MissingReadsError: If there are no reads or only half of a read pair
        """
        if self.forward is None and self.reverse is None and self.long is None:
            raise MissingReadsError(f"No read files found for sample {sample_name}")
        if (self.forward is None) != (self.reverse is None):
            present = self.forward if self.forward is not None else self.reverse
            raise MissingReadsError(
                f"Sample {sample_name} has unpaired short reads: {present.name}"
            )
        if self.long is None:
            logger.warning(f"No long reads for sample {sample_name}; short-read-only assembly")
        elif not self.has_short_reads():
            logger.warning(f"No short reads for sample {sample_name}; long-read-only assembly")


def role_for_filename(filename: str) -> Optional[ReadRole]:
    """Role of a read file by its name, or None if the file is not a read file."""
    return ROLE_KEYS.get(filename.rsplit("-", maxsplit=1)[-1])


def classify_reads(folder: PathLike) -> SampleReads:
    """Classify the files directly inside a sample folder by read role.

    Files that match no role are ignored.

    Args:
        folder: Sample folder containing read files

    Returns:
        SampleReads with a path for every role that was found

    Raises:
        AmbiguousReadsError: If more than one file matches the same role
    """
    found: Dict[ReadRole, Path] = {}
    for path in list_files(folder):
        role = role_for_filename(path.name)
        if role is None:
            logger.debug(f"Ignoring {path}")
            continue
        if role in found:
            raise AmbiguousReadsError(
                f"More than one {role.value} read file in {folder}: "
                f"{found[role].name}, {path.name}"
            )
        found[role] = path

    return SampleReads(
        forward=found.get(ReadRole.FORWARD),
        reverse=found.get(ReadRole.REVERSE),
        long=found.get(ReadRole.LONG),
    )
