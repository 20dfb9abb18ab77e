#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from trade_advisor.config.loader import ConfigLoader
from trade_advisor.config.validation import ConfigValidator, ValidationError


def validate_symbol_config(symbol: str) -> list[ValidationError]:
    """Validate configuration for a specific symbol."""
    loader = ConfigLoader.create()
    config = loader.merge_config(symbol)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("Validating trade advisor configuration...")

    loader = ConfigLoader.create()

    # Symbols to validate
    test_symbols = [
        "BTCUSDT",
        "ETHUSDT",
        "DOGEUSDT",
        "UNKNOWNUSDT"  # Should use defaults
    ]

    all_valid = True

    for symbol in test_symbols:
        print(f"\nValidating {symbol}...")

        try:
            errors = validate_symbol_config(symbol)

            if errors:
                print(f"Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  - {error.field}: {error.message} (value: {error.value})")
                all_valid = False
            else:
                print(f"{symbol} configuration is valid")

        except Exception as e:
            print(f"Error validating {symbol}: {e}")
            all_valid = False

    # Test per-request overrides
    print("\nTesting per-request overrides...")
    test_overrides = {
        "aggregation": {"vote_margin": 4},
        "plan": {"stop_level_buffer": 0.03},
    }

    try:
        config = loader.merge_config("BTCUSDT", test_overrides)
        errors = ConfigValidator.validate_config(config)

        if errors:
            print("Override validation failed:")
            for error in errors:
                print(f"  - {error.field}: {error.message}")
            all_valid = False
        else:
            print("Override validation passed")

    except Exception as e:
        print(f"Error testing overrides: {e}")
        all_valid = False

    if all_valid:
        print("\nAll configuration validation passed!")
        sys.exit(0)
    else:
        print("\nConfiguration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
