import pytest

from unicycler_pipeline.read_files import (
    AmbiguousReadsError,
    MissingReadsError,
    ReadRole,
    SampleReads,
    classify_reads,
    role_for_filename,
)


@pytest.mark.fast
@pytest.mark.unit
@pytest.mark.parametrize(
    "filename, role",
    [
        ("a-1.fastq", ReadRole.FORWARD),
        ("a-1.fastq.gz", ReadRole.FORWARD),
        ("a-2.fastq.gz", ReadRole.REVERSE),
        ("SW0001_ONP-L1000.fastq", ReadRole.LONG),
        ("SW0001_ONP-L1000.fastq.gz", ReadRole.LONG),
        ("1.fastq", ReadRole.FORWARD),  # no dash: the whole name is the key
        ("readme.txt", None),
        ("a-11.fastq", None),
        ("a-1.fq", None),
        ("illumina_reads_1.fastq", None),  # role key must follow a dash
    ],
)
def test_role_for_filename(filename, role):
    assert role_for_filename(filename) == role


@pytest.mark.fast
@pytest.mark.unit
def test_classify_reads_triple(tmp_path, make_sample):
    sample = make_sample(tmp_path, "a", ["a-1.fastq", "a-2.fastq.gz", "a-L1000.fastq"])
    reads = classify_reads(sample)
    assert reads == SampleReads(
        forward=sample / "a-1.fastq",
        reverse=sample / "a-2.fastq.gz",
        long=sample / "a-L1000.fastq",
    )


@pytest.mark.fast
@pytest.mark.unit
def test_classify_reads_ignores_unrecognized_files(tmp_path, make_sample):
    sample = make_sample(
        tmp_path, "a", ["a-1.fastq", "a-2.fastq", "a-L1000.fastq", "readme.txt"]
    )
    (sample / "nested-1.fastq").mkdir()  # directories are never read files
    reads = classify_reads(sample)
    assert reads.forward.name == "a-1.fastq"
    assert reads.reverse.name == "a-2.fastq"
    assert reads.long.name == "a-L1000.fastq"


@pytest.mark.fast
@pytest.mark.unit
def test_classify_reads_only_unrecognized(tmp_path, make_sample):
    sample = make_sample(tmp_path, "a", ["readme.txt"])
    assert classify_reads(sample) == SampleReads(None, None, None)


@pytest.mark.fast
@pytest.mark.unit
def test_classify_reads_duplicate_role_is_an_error(tmp_path, make_sample):
    sample = make_sample(tmp_path, "a", ["a-1.fastq", "b-1.fastq.gz", "a-2.fastq"])
    with pytest.raises(AmbiguousReadsError, match="a-1.fastq, b-1.fastq.gz"):
        classify_reads(sample)


@pytest.mark.fast
@pytest.mark.unit
def test_classify_reads_does_not_leak_between_folders(tmp_path, make_sample):
    first = make_sample(tmp_path, "first", ["f-1.fastq", "f-2.fastq", "f-L1000.fastq"])
    second = make_sample(tmp_path, "second", ["s-1.fastq", "s-2.fastq"])
    classify_reads(first)
    reads = classify_reads(second)
    assert reads.long is None
    assert reads.forward == second / "s-1.fastq"


@pytest.mark.fast
@pytest.mark.unit
def test_require_assemblable_accepts_missing_long_reads(tmp_path, caplog):
    reads = SampleReads(forward=tmp_path / "a-1.fastq", reverse=tmp_path / "a-2.fastq")
    reads.require_assemblable("a")
    assert "short-read-only" in caplog.text


@pytest.mark.fast
@pytest.mark.unit
def test_require_assemblable_accepts_long_reads_only(tmp_path):
    SampleReads(long=tmp_path / "a-L1000.fastq").require_assemblable("a")


@pytest.mark.fast
@pytest.mark.unit
def test_require_assemblable_rejects_empty_sample():
    with pytest.raises(MissingReadsError, match="No read files"):
        SampleReads().require_assemblable("a")


@pytest.mark.fast
@pytest.mark.unit
def test_require_assemblable_rejects_unpaired_short_reads(tmp_path):
    reads = SampleReads(forward=tmp_path / "a-1.fastq", long=tmp_path / "a-L1000.fastq")
    with pytest.raises(MissingReadsError, match="unpaired"):
        reads.require_assemblable("a")
