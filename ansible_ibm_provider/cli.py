#!/usr/bin/env python

import argparse
import os

from ansible_ibm_provider.generator import Generator

# Define default paths relative to the current file's location
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
DEFAULT_INPUT_DIR = os.path.join(PROJECT_ROOT, "inputs")
DEFAULT_OUTPUT_DIR = os.path.join(PROJECT_ROOT, "outputs")


def main():
    """
    Parses command-line arguments and renders the configured Ansible collections.
    """
    parser = argparse.ArgumentParser(
        prog="ansible-ibm-generate",
        description="Renders the IBM Cloud Ansible modules into a collection tree.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        default=os.path.join(DEFAULT_INPUT_DIR, "generator_config.yaml"),
        help="Path to the generator config file.",
    )
    parser.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help="Directory to save the generated Ansible collections.",
    )
    args = parser.parse_args()

    if not os.path.exists(args.output_dir):
        os.makedirs(args.output_dir)

    generator = Generator.from_files(config_path=args.config)
    generator.generate(output_dir=args.output_dir)
    print("\nGeneration complete.")


if __name__ == "__main__":
    main()
