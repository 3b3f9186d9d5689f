"""
Package information utility.

This module provides a command-line utility for displaying
information about the budplate installation and environment.
"""

import platform
import sys
from typing import Any, Dict

import yaml

import budplate


def get_system_info() -> Dict[str, Any]:
    """
    Get system information relevant to budplate.

    Returns:
        Dictionary containing system information
    """
    return {
        'python_version': sys.version,
        'platform': platform.platform(),
        'architecture': platform.architecture(),
        'yaml_version': yaml.__version__,
    }


def get_budplate_info() -> Dict[str, Any]:
    """
    Get budplate-specific information.

    Returns:
        Dictionary containing budplate information
    """
    from budplate.encoding import list_encoders
    from budplate.utils.config import get_config

    config = get_config()
    return {
        'version': budplate.__version__,
        'author': budplate.__author__,
        'encoders': list_encoders(),
        'config_file': str(config.config_file),
        'config': config.to_dict(),
    }


def print_info() -> None:
    """Print formatted information about budplate and the system."""
    print("budplate template compiler")
    print("=" * 40)

    info = get_budplate_info()
    print(f"\nbudplate Version: {info['version']}")
    print(f"Author: {info['author']}")
    print(f"Encoders: {', '.join(info['encoders'])}")
    print(f"Config File: {info['config_file']}")

    config = info['config']
    print(f"Default Encoder: {config['render']['default_encoder']}")
    print(f"Debug Artifacts: {config['debug']['enabled']} ({config['debug']['debug_dir']})")
    print(f"Max Call Depth: {config['runtime']['max_call_depth']}")

    system_info = get_system_info()
    print(f"\nPython Version: {system_info['python_version'].split()[0]}")
    print(f"Platform: {system_info['platform']}")
    print(f"Architecture: {system_info['architecture'][0]}")
    print(f"PyYAML Version: {system_info['yaml_version']}")


def main() -> None:
    """Main entry point for the budplate-info command."""
    try:
        print_info()
    except Exception as e:
        print(f"Error getting system information: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
