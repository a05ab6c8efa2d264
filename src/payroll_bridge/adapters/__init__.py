"""Payroll system adapters behind one registry."""

from __future__ import annotations

from payroll_bridge.adapters.base import BasePayrollAdapter
from payroll_bridge.adapters.poweroffice import PowerOfficeAdapter
from payroll_bridge.adapters.registry import AdapterRegistry
from payroll_bridge.adapters.tripletex import TripletexAdapter

__all__ = ["AdapterRegistry", "BasePayrollAdapter", "PowerOfficeAdapter", "TripletexAdapter"]
