"""
Este modulo valida y convierte las entradas crudas del formulario antes de llamar al motor.

Objetivo:
- Convertir texto a float (acepta coma decimal: "12,5").
- Validar rango (LRV < URV) y tolerancia (>= 0).
- Validar que las 5 mediciones esten completas y sean numericas.
- Armar un DatosInstrumento a partir del dict del formulario.

Notas:
- El motor nunca recibe texto sin convertir.
- Todos los errores heredan de ErrorValidacion (ValueError) y traen un mensaje
  listo para mostrar al usuario.
"""

import math
from typing import Mapping, Sequence, Tuple

from calibrador_420.config.settings import SETTINGS
from calibrador_420.model.calibracion import porcentajes_span
from calibrador_420.model.instrumento import DatosInstrumento, TipoTolerancia


class ErrorValidacion(ValueError):
    pass


class EntradaNoNumerica(ErrorValidacion):
    pass


class RangoInvalido(ErrorValidacion):
    pass


class ToleranciaInvalida(ErrorValidacion):
    pass


class MedicionesIncompletas(ErrorValidacion):
    pass


def a_numero(texto, campo: str = "valor") -> float:
    """
    Convierte una entrada del formulario a float.

    Errores:
    - EntradaNoNumerica si esta vacia, no es numerica o no es finita
    """
    if isinstance(texto, (int, float)) and not isinstance(texto, bool):
        valor = float(texto)
    else:
        limpio = str(texto if texto is not None else "").strip().replace(",", ".")
        if limpio == "":
            raise EntradaNoNumerica(f"El campo '{campo}' esta vacio.")
        try:
            valor = float(limpio)
        except ValueError as e:
            raise EntradaNoNumerica(f"El campo '{campo}' no es un numero: {texto!r}") from e

    if not math.isfinite(valor):
        raise EntradaNoNumerica(f"El campo '{campo}' no es un numero finito.")

    return valor


def validar_rango(lrv: float, urv: float) -> None:
    if not lrv < urv:
        raise RangoInvalido("El Valor Minimo (LRV) debe ser menor que el Valor Maximo (URV).")


def validar_tolerancia(tolerancia: float) -> None:
    if tolerancia < 0:
        raise ToleranciaInvalida("La tolerancia no puede ser negativa.")


def validar_mediciones(textos: Sequence) -> Tuple[float, ...]:
    """
    Convierte las 5 mediciones del paso 2.

    Errores:
    - MedicionesIncompletas si falta algun punto, alguno no es numerico
      o la cantidad no es la esperada
    """
    if len(textos) != SETTINGS.n_puntos:
        raise MedicionesIncompletas(
            f"Se esperaban {SETTINGS.n_puntos} valores medidos, llegaron {len(textos)}."
        )

    valores = []
    faltantes = []
    for pct, texto in zip(porcentajes_span(), textos):
        try:
            valores.append(a_numero(texto, f"{pct}%"))
        except EntradaNoNumerica:
            faltantes.append(f"{pct}%")

    if faltantes:
        raise MedicionesIncompletas(
            "Por favor, ingrese todos los valores medidos (faltan: " + ", ".join(faltantes) + ")."
        )

    return tuple(valores)


def construir_instrumento(formulario: Mapping) -> DatosInstrumento:
    """
    Arma un DatosInstrumento desde el formulario del paso 1.

    Claves esperadas: lrv, urv, tolerancia (obligatorias) y opcionalmente
    unidad, tipo_tolerancia, tag, marca, modelo, alimentacion, calibrador, tecnico.
    """
    lrv = a_numero(formulario.get("lrv"), "LRV")
    urv = a_numero(formulario.get("urv"), "URV")
    validar_rango(lrv, urv)

    tolerancia = a_numero(formulario.get("tolerancia"), "Tolerancia")
    validar_tolerancia(tolerancia)

    tipo = formulario.get("tipo_tolerancia", SETTINGS.tipo_tolerancia_default)
    try:
        tipo = TipoTolerancia(tipo if isinstance(tipo, TipoTolerancia) else str(tipo).upper())
    except ValueError as e:
        raise ErrorValidacion(f"Tipo de tolerancia no soportado: {tipo!r}") from e

    def texto(clave: str) -> str:
        return str(formulario.get(clave) or "").strip()

    return DatosInstrumento(
        lrv=lrv,
        urv=urv,
        tolerancia=tolerancia,
        unidad=texto("unidad"),
        tipo_tolerancia=tipo,
        tag=texto("tag"),
        marca=texto("marca"),
        modelo=texto("modelo"),
        alimentacion=texto("alimentacion"),
        calibrador=texto("calibrador"),
        tecnico=texto("tecnico"),
    )
