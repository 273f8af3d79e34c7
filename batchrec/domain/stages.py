from __future__ import annotations

from enum import Enum


class BMRType(str, Enum):
    STANDARD = "standard"
    KIT = "kit"

    @classmethod
    def parse(cls, value) -> "BMRType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == "kit":
            return cls.KIT
        return cls.STANDARD


class Stage(str, Enum):
    CUTTING = "cutting"
    STITCHING = "stitching"
    DRAPING = "draping"
    FOLDING = "folding"
    PACKING = "packing"
    SEALING = "sealing"
    INNER_BOX_PACKING = "inner_box_packing"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def standard_key(self) -> str:
        return _STANDARD_KEYS[self]

    @property
    def kit_key(self) -> str:
        return _KIT_KEYS[self]

    def storage_key(self, bmr_type: BMRType) -> str:
        return self.kit_key if bmr_type is BMRType.KIT else self.standard_key

    def lookup_keys(self, bmr_type: BMRType) -> tuple[str, str]:
        """Storage keys to try when reading, the variant's own key first."""
        if bmr_type is BMRType.KIT:
            return (self.kit_key, self.standard_key)
        return (self.standard_key, self.kit_key)


_LABELS = {
    Stage.CUTTING: "4.1 Cutting",
    Stage.STITCHING: "4.2 Stitching",
    Stage.DRAPING: "4.3 Draping",
    Stage.FOLDING: "4.4 Folding",
    Stage.PACKING: "4.5 Kit Assemble & Packing",
    Stage.SEALING: "4.6 Sealing",
    Stage.INNER_BOX_PACKING: "4.7 Inner Box Packing",
}

_STANDARD_KEYS = {
    Stage.CUTTING: "4.1 Cutting",
    Stage.STITCHING: "4.2 Stitching",
    Stage.DRAPING: "4.3 Draping",
    Stage.FOLDING: "4.4 Folding",
    Stage.PACKING: "4.5 Packing",
    Stage.SEALING: "4.6 Sealing",
    Stage.INNER_BOX_PACKING: "4.7 Inner Box Packing",
}

_KIT_KEYS = {
    Stage.CUTTING: "step1_cutting",
    Stage.STITCHING: "step2_stitching",
    Stage.DRAPING: "step3_draping",
    Stage.FOLDING: "step4_folding",
    Stage.PACKING: "step5_packing",
    Stage.SEALING: "step6_sealing",
    Stage.INNER_BOX_PACKING: "step7_inner_box",
}

STAGES: tuple[Stage, ...] = tuple(Stage)
