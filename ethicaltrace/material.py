"""
Material Tracking store.

Placeholder store following the shared register-once / certify-once
pattern: materials are registered by the admin with their origin and
supplying party, then certified.
"""

from typing import Optional

from .outcome import ErrorKind, Outcome, StoreError
from .records import Material
from .registry import Registry
from .store import ComplianceStore
from .validation import validate_identifier

ERR_MATERIAL_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 101, "ERR-MATERIAL-EXISTS")
ERR_MATERIAL_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 102, "ERR-MATERIAL-NOT-FOUND")


class MaterialTracking(ComplianceStore):

    store_name = "material_tracking"

    def __init__(self, admin, clock=None, lock=None, audit=None):
        super().__init__(admin, clock=clock, lock=lock, audit=audit)
        self.materials: Registry[str, Material] = Registry(
            "materials", self.gate, self.clock,
            exists_error=ERR_MATERIAL_EXISTS,
            missing_error=ERR_MATERIAL_NOT_FOUND,
            stamp_field="certification_date"
        )

    def register_material(
        self,
        caller: str,
        material_id: str,
        name: str,
        origin: str,
        supplier_id: str
    ) -> Outcome:
        validate_identifier(material_id, "material_id")
        validate_identifier(supplier_id, "supplier_id")
        record = Material(name=name, origin=origin, supplier_id=supplier_id, certifier=caller)
        return self._mutate(
            "register_material", caller,
            lambda: self.materials.register(caller, material_id, record),
            material_id=material_id
        )

    def certify_material(self, caller: str, material_id: str) -> Outcome:
        return self._mutate(
            "certify_material", caller,
            lambda: self.materials.promote(caller, material_id, certified=True, certifier=caller),
            material_id=material_id
        )

    def get_material(self, material_id: str) -> Optional[Material]:
        return self.materials.get(material_id)

    def is_material_certified(self, material_id: str) -> bool:
        material = self.materials.get(material_id)
        return material is not None and material.certified
