"""Adapter registry: one shared adapter instance per payroll system."""

from __future__ import annotations

from payroll_bridge.adapters.base import BasePayrollAdapter
from payroll_bridge.adapters.poweroffice import PowerOfficeAdapter
from payroll_bridge.adapters.tripletex import TripletexAdapter
from payroll_bridge.core.config import ExportConfig
from payroll_bridge.core.exceptions import UnsupportedSystemError
from payroll_bridge.core.protocols import IMappingStore
from payroll_bridge.mapping.identity_resolver import IdentityResolver
from payroll_bridge.mapping.salary_code_resolver import SalaryCodeResolver
from payroll_bridge.models.payroll import AdapterCapabilities, PayrollSystemType

ADAPTER_TYPES: dict[PayrollSystemType, type[BasePayrollAdapter]] = {
    PayrollSystemType.TRIPLETEX: TripletexAdapter,
    PayrollSystemType.POWEROFFICE: PowerOfficeAdapter,
}


class AdapterRegistry:
    """Builds adapters lazily and hands out the same instance per system.

    Construct once at application start and pass it to whatever runs exports.
    """

    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        salary_code_resolver: SalaryCodeResolver,
        export_config: ExportConfig | None = None,
        adapter_types: dict[PayrollSystemType, type[BasePayrollAdapter]] | None = None,
    ) -> None:
        self._identities = identity_resolver
        self._salary_codes = salary_code_resolver
        self._export_config = export_config or ExportConfig()
        self._adapter_types = dict(adapter_types or ADAPTER_TYPES)
        self._adapters: dict[PayrollSystemType, BasePayrollAdapter] = {}

    @classmethod
    def from_store(
        cls, store: IMappingStore, export_config: ExportConfig | None = None
    ) -> AdapterRegistry:
        return cls(
            identity_resolver=IdentityResolver(store),
            salary_code_resolver=SalaryCodeResolver(store),
            export_config=export_config,
        )

    def _lookup(self, system_type: str) -> PayrollSystemType | None:
        try:
            system = PayrollSystemType(system_type)
        except ValueError:
            return None
        return system if system in self._adapter_types else None

    def get_adapter(self, system_type: str) -> BasePayrollAdapter:
        system = self._lookup(system_type)
        if system is None:
            raise UnsupportedSystemError(str(system_type))
        if system not in self._adapters:
            self._adapters[system] = self._adapter_types[system](
                identity_resolver=self._identities,
                salary_code_resolver=self._salary_codes,
                export_config=self._export_config,
            )
        return self._adapters[system]

    def is_system_supported(self, system_type: str) -> bool:
        return self._lookup(system_type) is not None

    def list_available_systems(self) -> list[PayrollSystemType]:
        return list(self._adapter_types)

    def capabilities(self) -> list[AdapterCapabilities]:
        return [self.get_adapter(s).capabilities() for s in self._adapter_types]
