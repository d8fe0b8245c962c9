"""
Module entry point for: python -m ocr_extractor

    python -m ocr_extractor extract <path> [options]
    python -m ocr_extractor batch <directory> [options]
    python -m ocr_extractor info <path>
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
