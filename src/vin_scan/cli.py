#!/usr/bin/env python3
"""
VIN Scan CLI - Command Line Interface
=====================================

Usage:
    vin-scan scan <image> [--provider aws] [--no-decode] [--json]
    vin-scan validate <vin> [--json]
    vin-scan decode <vin> [--json]
"""

import argparse
import json
import sys
from pathlib import Path

from . import __version__


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def cmd_scan(args) -> int:
    """Extract (and optionally decode) a VIN from a single image."""
    from .config import get_config
    from .pipeline.service import VINProcessingService

    image_path = Path(args.image)
    if not image_path.is_file():
        print(f"Error: Image not found: {image_path}", file=sys.stderr)
        return 1

    image_bytes = image_path.read_bytes()

    with VINProcessingService.from_config(get_config(), provider_type=args.provider) as service:
        if args.no_decode:
            result = service.extract_vin_from_image(image_bytes)
            ok = result.is_valid
            if args.json:
                _print_json(result.to_dict())
            else:
                print(f"VIN: {result.vin or '-'}")
                print(f"Valid: {result.is_valid}")
                print(f"Confidence: {result.confidence:.3f}")
                if result.error:
                    print(f"Error: {result.error}")
            return 0 if ok else 1

        info = service.process_vin_image(image_bytes)

    if args.json:
        _print_json(info.to_dict())
    else:
        print(f"VIN: {info.vin or '-'}")
        print(f"Valid: {info.is_valid}")
        print(f"Confidence: {info.confidence:.3f}")
        if info.is_valid:
            vehicle = " ".join(str(part) for part in (info.year, info.make, info.model, info.trim) if part)
            print(f"Vehicle: {vehicle or 'unknown'}")
        if info.error:
            print(f"Error: {info.error}")
            if info.ocr_text:
                print(f"OCR text: {info.ocr_text}")

    return 0 if info.is_valid else 1


def cmd_validate(args) -> int:
    """Check a VIN's characters, length and check digit."""
    from .core.vin_utils import validate_vin

    result = validate_vin(args.vin)

    if args.json:
        _print_json(result.to_dict())
    else:
        print(f"VIN: {result.vin}")
        print(f"Length OK: {result.is_valid_length}")
        if result.invalid_chars:
            print(f"Invalid characters: {', '.join(result.invalid_chars)}")
        if result.expected_check_digit is not None:
            print(f"Check digit: {result.vin[8]} (expected {result.expected_check_digit})")
        print(f"Valid: {result.is_fully_valid}")

    return 0 if result.is_fully_valid else 1


def cmd_decode(args) -> int:
    """Decode a VIN with the NHTSA registry."""
    from .config import get_config
    from .registry.nhtsa import NHTSADecoder

    vin = args.vin.strip().upper()
    with NHTSADecoder.from_config(get_config().registry) as decoder:
        result = decoder.decode_vin(vin)

    if args.json:
        _print_json(result.to_dict())
    else:
        for key, value in result.to_dict().items():
            print(f"{key}: {value}")

    return 1 if result.error_code == "999" else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vin-scan',
        description='VIN Scan - read, validate and decode Vehicle Identification Numbers',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    scan_parser = subparsers.add_parser('scan', help='Extract a VIN from an image')
    scan_parser.add_argument('image', help='Path to image file')
    scan_parser.add_argument('--provider', '-p', default=None,
                             help='OCR provider: google, aws or paddleocr (default: OCR_PROVIDER)')
    scan_parser.add_argument('--no-decode', action='store_true',
                             help='Skip the NHTSA registry lookup')
    scan_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    validate_parser = subparsers.add_parser('validate', help='Validate a VIN check digit')
    validate_parser.add_argument('vin', help='VIN to validate')
    validate_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    decode_parser = subparsers.add_parser('decode', help='Decode a VIN via NHTSA vPIC')
    decode_parser.add_argument('vin', help='VIN to decode')
    decode_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        'scan': cmd_scan,
        'validate': cmd_validate,
        'decode': cmd_decode,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
