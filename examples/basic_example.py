#!/usr/bin/env python3
"""
Example script demonstrating the usage of FlagParser.

This script shows how to define a dataclass with different field kinds
and use FlagParser to decode the command line into it.

Try:
    python basic_example.py --name run1 -v -t 30.5 input.csv other.csv
    python basic_example.py --help
"""

import sys
from dataclasses import dataclass, field
from typing import Optional

from flaghammer import FlagParser


@dataclass
class SimulationConfig:
    """Runs a simulation over the given input files."""

    name: str = field(metadata={"help": "Name of the simulation"})
    temperature: float = field(
        default=27.0, metadata={"short": "t", "help": "Temperature in Celsius"}
    )
    num_simulations: int = field(
        default=100, metadata={"short": "n", "help": "Number of simulations to run"}
    )
    seed: Optional[int] = field(default=None, metadata={"help": "Random seed"})
    verbose: bool = field(
        default=False, metadata={"short": "v", "help": "Enable verbose output"}
    )
    inputs: list[str] = field(default_factory=list, metadata={"help": "Input files"})

    @classmethod
    def flag_config(cls, builder):
        return builder.set_long("num_simulations", "runs")


def main() -> None:
    """Main function demonstrating the parser."""
    parser = FlagParser(SimulationConfig)

    if "--help" in sys.argv[1:]:
        parser.print_usage()
        return

    config = parser.parse_or_exit()

    print("Parsed Configuration:")
    print("-" * 30)
    print(f"Simulation Name: {config.name}")
    print(f"Temperature: {config.temperature}°C")
    print(f"Number of Simulations: {config.num_simulations}")
    print(f"Seed: {config.seed}")
    print(f"Verbose: {config.verbose}")
    print(f"Inputs: {', '.join(config.inputs) or '(none)'}")


if __name__ == "__main__":
    main()
