import os
import shlex
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .io_helpers import load_config

DEFAULT_ASSEMBLER = "unicycler"
DEFAULT_THREADS = 32
DEFAULT_MODE = "bold"
DEFAULT_LOG_PARSER = "python3 log_parser.py"
DEFAULT_FASTA_EXTRACTOR = "python3 fasta_extractor.py"
DEFAULT_COPY_ASSEMBLIES = True
DEFAULT_ASSEMBLIES_DIR = "assemblies"

ASSEMBLY_MODES = ("conservative", "normal", "bold")


@dataclass
class PipelineConfig:
    """Tools and parameters used for one pipeline run.

    Attributes:
        assembler (str): Unicycler executable, as a name on PATH or a path.
        threads (int): Threads passed to each assembly.
        mode (str): Unicycler bridging mode.
        log_parser (str | None): Command that builds the summary tables from unicycler.log
            files, or None to skip that step.
        fasta_extractor (str | None): Command that splits assembly.fasta files into one
            file per molecule, or None to skip that step.
        copy_assemblies (bool): Whether to also extract all molecules into a shared folder.
        assemblies_dir (str): Name of the shared folder inside the output folder.
    """

    assembler: str = DEFAULT_ASSEMBLER
    threads: int = DEFAULT_THREADS
    mode: str = DEFAULT_MODE
    log_parser: Optional[str] = DEFAULT_LOG_PARSER
    fasta_extractor: Optional[str] = DEFAULT_FASTA_EXTRACTOR
    copy_assemblies: bool = DEFAULT_COPY_ASSEMBLIES
    assemblies_dir: str = DEFAULT_ASSEMBLIES_DIR

    def __post_init__(self):
        if not isinstance(self.assembler, str) or not self.assembler:
            raise ValueError("An assembler must be configured")
        for name in ("log_parser", "fasta_extractor"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a command string or null, got {value!r}")
        # bool is a subclass of int
        if not isinstance(self.threads, int) or isinstance(self.threads, bool):
            raise ValueError(f"threads must be an integer, got {self.threads!r}")
        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        if not isinstance(self.copy_assemblies, bool):
            raise ValueError(f"copy_assemblies must be true or false, got {self.copy_assemblies!r}")
        if (
            not isinstance(self.assemblies_dir, str)
            or not self.assemblies_dir
            or os.sep in self.assemblies_dir
        ):
            raise ValueError(f"assemblies_dir must be a folder name, got {self.assemblies_dir!r}")
        if self.mode not in ASSEMBLY_MODES:
            raise ValueError(f"mode must be one of {ASSEMBLY_MODES}, got {self.mode}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PipelineConfig":
        if not isinstance(config, dict):
            raise ValueError("Config must be a mapping with a pipeline section")
        pipeline = config.get("pipeline", {}) or {}
        if not isinstance(pipeline, dict):
            raise ValueError("pipeline config section must be a mapping")
        unknown = set(pipeline) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown pipeline config keys: {sorted(unknown)}")

        return cls(
            assembler=pipeline.get("assembler", DEFAULT_ASSEMBLER),
            threads=pipeline.get("threads", DEFAULT_THREADS),
            mode=pipeline.get("mode", DEFAULT_MODE),
            log_parser=pipeline.get("log_parser", DEFAULT_LOG_PARSER),
            fasta_extractor=pipeline.get("fasta_extractor", DEFAULT_FASTA_EXTRACTOR),
            copy_assemblies=pipeline.get("copy_assemblies", DEFAULT_COPY_ASSEMBLIES),
            assemblies_dir=pipeline.get("assemblies_dir", DEFAULT_ASSEMBLIES_DIR),
        )

    @classmethod
    def from_yaml(cls, yaml_path) -> "PipelineConfig":
        return cls.from_config(load_config(yaml_path))

    def assembler_cmd(self) -> List[str]:
        return shlex.split(self.assembler)

    def log_parser_cmd(self) -> List[str]:
        """Log parser as an argument list; empty if the step is disabled."""
        return shlex.split(self.log_parser) if self.log_parser else []

    def fasta_extractor_cmd(self) -> List[str]:
        """FASTA extractor as an argument list; empty if the step is disabled."""
        return shlex.split(self.fasta_extractor) if self.fasta_extractor else []

    def to_yaml_config(self) -> Dict[str, Any]:
        """Convert the config to a YAML-compatible dictionary readable by from_config."""
        return {
            "pipeline": {
                "assembler": self.assembler,
                "threads": self.threads,
                "mode": self.mode,
                "log_parser": self.log_parser,
                "fasta_extractor": self.fasta_extractor,
                "copy_assemblies": self.copy_assemblies,
                "assemblies_dir": self.assemblies_dir,
            }
        }

    def write_config(self, yaml_path) -> None:
        """Write the config to a YAML file.

        Args:
            yaml_path: Path where the YAML file should be written
        """
        with open(yaml_path, "w") as f:
            yaml.dump(self.to_yaml_config(), f, default_flow_style=False)
