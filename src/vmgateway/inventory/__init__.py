"""Inventory listing for vmgateway."""

from vmgateway.inventory.lister import list_vms, parse_vm_names

__all__ = ["list_vms", "parse_vm_names"]
