"""
Definicion de estructuras de datos del calibrador

- DatosInstrumento: configuracion del instrumento (llega desde el formulario del paso 1)
- EcuacionLineal: curva 4-20 mA calculada por el motor
- ResultadoCalibracion: todo lo que necesita el reporte (ideales, medidos, errores, veredicto)

Estas clases son el contrato comun entre Controller, Model y View.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class TipoTolerancia(Enum):
    PORCENTAJE = "PORCENTAJE"   # % del span
    ABSOLUTA = "ABSOLUTA"       # en unidades de PV


@dataclass(frozen=True)
class DatosInstrumento:
    lrv: float
    urv: float
    tolerancia: float
    unidad: str = ""
    tipo_tolerancia: TipoTolerancia = TipoTolerancia.PORCENTAJE

    # Datos del ensayo (solo se muestran en el reporte)
    tag: str = ""
    marca: str = ""
    modelo: str = ""
    alimentacion: str = ""
    calibrador: str = ""
    tecnico: str = ""

    @property
    def span(self) -> float:
        return self.urv - self.lrv


@dataclass(frozen=True)
class EcuacionLineal:
    pendiente: float
    intercepto: float
    texto: str

    @property
    def valida(self) -> bool:
        # Con span distinto de cero la pendiente 16/span nunca es cero
        return self.pendiente != 0.0


@dataclass(frozen=True)
class ResultadoCalibracion:
    instrumento: DatosInstrumento
    ideales: Tuple[float, ...]
    medidos: Tuple[float, ...]
    errores: Tuple[float, ...]
    umbral: float
    aprobado: bool
    ecuacion: EcuacionLineal
