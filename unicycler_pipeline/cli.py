#!/usr/bin/env python3
"""
Pipeline to assemble genomes using Unicycler.

Usage:
    unicycler-pipeline -i input_folder -o output_folder [-c config.yaml]
"""

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional

import yaml

from .config import PipelineConfig
from .io_helpers import normalize_dir_path
from .pipeline import unicycler_pipeline
from .pipeline_steps import ToolNotFoundError

logger = logging.getLogger(__name__)

HELP = textwrap.dedent(
    """
    The input folder must contain one subfolder per sample with the Illumina and ONP
    reads used for its assembly. Read files are recognized by the part of their name
    after the last "-": 1.fastq[.gz] for forward reads, 2.fastq[.gz] for reverse
    reads and L1000.fastq[.gz] for ONP reads. For example:

    ~/Documents/input/
                  SW0001/
                      SW0001_illumina-1.fastq
                      SW0001_illumina-2.fastq
                      SW0001_ONP-L1000.fastq
                  SW0002/
                      SW0002_illumina-1.fastq.gz
                      SW0002_illumina-2.fastq.gz
                      SW0002_ONP-L1000.fastq.gz

    Every sample is assembled into a folder of the same name inside the output
    folder. When all assemblies are done, the unicycler.log files are parsed into
    assemblies_summary.csv and molecules_summary.csv in the output folder, and each
    assembly.fasta is split into one fasta file per molecule, named after the sample
    with the length and topology of the molecule. A copy of all extracted fasta files
    is kept in the assemblies folder inside the output folder.

    A sample without ONP reads gets a short-read-only assembly. Samples with more than
    one file for the same kind of read, or with unpaired Illumina reads, are not
    assembled. The exit status is non-zero if any sample or postprocessing step
    failed; details are in pipeline_summary.json in the output folder.

    Programs used:
      i)   unicycler: https://github.com/rrwick/Unicycler
      ii)  log_parser: https://github.com/Ivanmugu/log_parser
      iii) fasta_extractor: https://github.com/Ivanmugu/fasta_extractor
    """
)


class _HelpAction(argparse.Action):
    """Print the full help and exit with a non-zero status."""

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        parser.exit(1)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unicycler-pipeline",
        description="Pipeline to assemble genomes using Unicycler.",
        epilog=HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-h", action=_HelpAction, help="show this help and exit")
    parser.add_argument(
        "-i", dest="input_folder", metavar="input_folder", required=True,
        help="path to input folder",
    )
    parser.add_argument(
        "-o", dest="output_folder", metavar="output_folder", required=True,
        help="path to output folder",
    )
    parser.add_argument(
        "-c", "--config", metavar="YAML", default=None,
        help="YAML file overriding the tools and assembly parameters",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log debug messages",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not Path(args.input_folder).is_dir():
        logger.error(f"Error: input_folder {args.input_folder} does not exist")
        return 1
    if not Path(args.output_folder).is_dir():
        logger.error(f"Error: output_folder {args.output_folder} does not exist")
        return 1
    logger.info("input_folder and output_folder exist")

    try:
        config = PipelineConfig.from_yaml(args.config) if args.config else PipelineConfig()
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Invalid config {args.config}: {e}")
        return 1

    input_folder = normalize_dir_path(args.input_folder)
    output_folder = normalize_dir_path(args.output_folder)
    logger.info(f"Path input folder:  {input_folder}")
    logger.info(f"Path output folder: {output_folder}")

    try:
        summary = unicycler_pipeline(input_folder, output_folder, config)
    except (ValueError, ToolNotFoundError) as e:
        logger.error(f"Error: {e}")
        return 1

    return 0 if summary["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
