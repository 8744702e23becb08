"""Install script generation."""

from shadowbox_provisioner.install_scripts.builder import bash_escape, get_install_script

__all__ = ["bash_escape", "get_install_script"]
