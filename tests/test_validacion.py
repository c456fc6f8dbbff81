"""
Pruebas de la validacion de entradas del formulario (controller/validacion.py).
"""

import pytest

from calibrador_420.controller.validacion import (
    EntradaNoNumerica,
    ErrorValidacion,
    MedicionesIncompletas,
    RangoInvalido,
    ToleranciaInvalida,
    a_numero,
    construir_instrumento,
    validar_mediciones,
    validar_rango,
    validar_tolerancia,
)
from calibrador_420.model.instrumento import TipoTolerancia


def _formulario(**cambios):
    base = {
        "tag": " PT-101 ",
        "marca": "Rosemount",
        "modelo": "3051",
        "alimentacion": "24 VDC",
        "lrv": "0",
        "urv": "250",
        "unidad": "kPa",
        "tolerancia": "0,5",
        "calibrador": "Fluke 754",
        "tecnico": "J. Perez",
    }
    base.update(cambios)
    return base


@pytest.mark.parametrize(
    "texto,esperado",
    [("12.5", 12.5), ("12,5", 12.5), ("  -3 ", -3.0), ("1e3", 1000.0), (7, 7.0), (0.25, 0.25)],
)
def test_a_numero_convierte(texto, esperado):
    assert a_numero(texto) == esperado


@pytest.mark.parametrize("texto", ["", "   ", None, "abc", "1.2.3", "nan", "inf", float("nan")])
def test_a_numero_rechaza(texto):
    with pytest.raises(EntradaNoNumerica):
        a_numero(texto, "LRV")


def test_a_numero_conserva_causa():
    with pytest.raises(EntradaNoNumerica) as info:
        a_numero("abc")
    assert isinstance(info.value.__cause__, ValueError)


def test_errores_de_validacion_son_value_error():
    for cls in (EntradaNoNumerica, RangoInvalido, ToleranciaInvalida, MedicionesIncompletas):
        assert issubclass(cls, ErrorValidacion)
        assert issubclass(cls, ValueError)


@pytest.mark.parametrize("lrv,urv", [(10, 10), (10, 5)])
def test_validar_rango_rechaza(lrv, urv):
    with pytest.raises(RangoInvalido):
        validar_rango(lrv, urv)


def test_validar_rango_ok():
    validar_rango(-1, 1)


def test_validar_tolerancia():
    validar_tolerancia(0)
    with pytest.raises(ToleranciaInvalida):
        validar_tolerancia(-0.1)


def test_validar_mediciones_ok():
    assert validar_mediciones(["0", "24", "51,0", "76", 100]) == (0, 24, 51, 76, 100)


def test_validar_mediciones_reporta_faltantes():
    with pytest.raises(MedicionesIncompletas) as info:
        validar_mediciones(["0", "24", "", "76", "x"])

    msg = str(info.value)
    assert "50%" in msg
    assert "100%" in msg
    assert "25%" not in msg


def test_validar_mediciones_cantidad_incorrecta():
    with pytest.raises(MedicionesIncompletas):
        validar_mediciones(["0", "24", "51", "76"])


def test_construir_instrumento():
    inst = construir_instrumento(_formulario())

    assert inst.lrv == 0
    assert inst.urv == 250
    assert inst.span == 250
    assert inst.tolerancia == 0.5
    assert inst.tipo_tolerancia == TipoTolerancia.PORCENTAJE
    assert inst.tag == "PT-101"
    assert inst.unidad == "kPa"
    assert inst.tecnico == "J. Perez"


def test_construir_instrumento_tolerancia_absoluta():
    inst = construir_instrumento(_formulario(tipo_tolerancia="absoluta"))
    assert inst.tipo_tolerancia == TipoTolerancia.ABSOLUTA

    inst = construir_instrumento(_formulario(tipo_tolerancia=TipoTolerancia.ABSOLUTA))
    assert inst.tipo_tolerancia == TipoTolerancia.ABSOLUTA


@pytest.mark.parametrize(
    "cambios,error",
    [
        ({"lrv": "300"}, RangoInvalido),
        ({"urv": ""}, EntradaNoNumerica),
        ({"tolerancia": "-1"}, ToleranciaInvalida),
        ({"tipo_tolerancia": "RELATIVA"}, ErrorValidacion),
    ],
)
def test_construir_instrumento_rechaza(cambios, error):
    with pytest.raises(error):
        construir_instrumento(_formulario(**cambios))


def test_construir_instrumento_campos_opcionales_vacios():
    inst = construir_instrumento({"lrv": 4, "urv": 20, "tolerancia": 1})
    assert inst.tag == ""
    assert inst.marca == ""
