"""
Motor de calculos de calibracion (funciones puras)

Este modulo contiene las funciones matematicas del calibrador 4-20 mA:

- Puntos ideales de calibracion (0, 25, 50, 75 y 100 % del span)
- Ecuacion lineal de la curva 4-20 mA (mA = m * PV + b)
- Errores punto a punto (ideal - medido)
- Veredicto de aprobacion contra un umbral de error

Nota:
- Ninguna funcion guarda estado ni toca la UI. Mismas entradas -> mismas salidas.
- La validacion de rango (LRV < URV) es responsabilidad del llamador.
"""

from typing import Sequence, Tuple

from calibrador_420.config.settings import SETTINGS
from calibrador_420.model.instrumento import EcuacionLineal, TipoTolerancia


TEXTO_RANGO_INVALIDO = "Rango invalido"


class LongitudNoCoincide(ValueError):
    """Las secuencias de valores ideales y medidos tienen distinto largo."""


# -------------------------------------------------------
# Puntos de calibracion
# -------------------------------------------------------

def porcentajes_span() -> Tuple[int, ...]:
    """Porcentaje del span de cada punto: (0, 25, 50, 75, 100)."""
    paso = 100 // (SETTINGS.n_puntos - 1)
    return tuple(i * paso for i in range(SETTINGS.n_puntos))


def calcular_puntos_ideales(lrv: float, urv: float) -> Tuple[float, ...]:
    """
    Calcula los 5 puntos ideales de calibracion.

    [LRV, LRV + s/4, LRV + 2s/4, LRV + 3s/4, URV] con s = URV - LRV

    No se recorta nada: con span cero la secuencia es constante y con span
    negativo es descendente.
    """
    span = urv - lrv
    incremento = span / 4.0
    return (
        lrv,
        lrv + incremento,
        lrv + 2.0 * incremento,
        lrv + 3.0 * incremento,
        urv,
    )


# -------------------------------------------------------
# Curva 4-20 mA
# -------------------------------------------------------

def _formatear_ecuacion(pendiente: float, intercepto: float) -> str:
    d = SETTINGS.decimales_ecuacion
    signo = "+" if intercepto >= 0 else "-"
    return f"Corriente (mA) = {pendiente:.{d}f} * PV {signo} {abs(intercepto):.{d}f}"


def calcular_ecuacion_lineal(lrv: float, urv: float) -> EcuacionLineal:
    """
    Resuelve la recta que pasa por (LRV, 4 mA) y (URV, 20 mA).

        m = 16 / (URV - LRV)
        b = 4 - m * LRV

    Con span cero retorna el centinela (m=0, b=4, "Rango invalido")
    en vez de dividir por cero.
    """
    span = urv - lrv
    if span == 0:
        return EcuacionLineal(pendiente=0.0, intercepto=SETTINGS.ma_min, texto=TEXTO_RANGO_INVALIDO)

    pendiente = (SETTINGS.ma_max - SETTINGS.ma_min) / span
    intercepto = SETTINGS.ma_min - pendiente * lrv

    return EcuacionLineal(
        pendiente=pendiente,
        intercepto=intercepto,
        texto=_formatear_ecuacion(pendiente, intercepto),
    )


def corriente_esperada(ecuacion: EcuacionLineal, pv: float) -> float:
    """Corriente (mA) que deberia entregar el transmisor para un valor de PV."""
    return ecuacion.pendiente * pv + ecuacion.intercepto


# -------------------------------------------------------
# Errores y veredicto
# -------------------------------------------------------

def calcular_errores(ideales: Sequence[float], medidos: Sequence[float]) -> Tuple[float, ...]:
    """
    Error punto a punto: ideal - medido.

    Errores:
    - LongitudNoCoincide si las secuencias no tienen el mismo largo
    """
    if len(ideales) != len(medidos):
        raise LongitudNoCoincide(
            f"Se esperaban {len(ideales)} valores medidos, llegaron {len(medidos)}"
        )
    return tuple(ideal - medido for ideal, medido in zip(ideales, medidos))


def puntos_dentro_de_tolerancia(errores: Sequence[float], umbral: float) -> Tuple[bool, ...]:
    """Estado por punto (True = dentro de tolerancia), mismo criterio que el veredicto."""
    if umbral < 0:
        return tuple(False for _ in errores)
    return tuple(abs(e) <= umbral for e in errores)


def verificar_aprobacion(errores: Sequence[float], umbral: float) -> bool:
    """
    True si todos los errores cumplen |error| <= umbral (limite inclusivo).

    Un umbral negativo no aprueba nada, pero no levanta error.
    """
    if umbral < 0:
        return False
    return all(abs(e) <= umbral for e in errores)


def umbral_desde_tolerancia(
    tolerancia: float,
    lrv: float,
    urv: float,
    tipo: TipoTolerancia = TipoTolerancia.PORCENTAJE,
) -> float:
    """
    Convierte la tolerancia del formulario en un umbral de error absoluto (unidades de PV).

    - PORCENTAJE: tolerancia / 100 * |span|
    - ABSOLUTA:   tolerancia tal cual
    """
    if tipo == TipoTolerancia.ABSOLUTA:
        return tolerancia
    return tolerancia / 100.0 * abs(urv - lrv)
