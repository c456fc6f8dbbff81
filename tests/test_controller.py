"""
Pruebas del flujo de 3 pasos (controller/controller.py).

Se usa una salida de reporte falsa para probar el controller sin reportlab.
"""

import logging

import pytest

from calibrador_420.controller.controller import CalibracionController, PasoCalibracion
from calibrador_420.model.estado import SesionCalibracion


FORMULARIO = {
    "tag": "TT-200",
    "lrv": "0",
    "urv": "100",
    "unidad": "degC",
    "tolerancia": "1",
    "tecnico": "Ana",
}

MEDIDOS_OK = ["0", "24", "51", "76", "100"]


class SalidaFalsa:
    extension = "txt"
    mime = "text/plain"

    def __init__(self):
        self.recibidos = []

    def generar(self, resultado):
        self.recibidos.append(resultado)
        return b"reporte"

    def nombre_archivo(self, resultado):
        return f"reporte_{resultado.instrumento.tag}.txt"


class SalidaRota(SalidaFalsa):
    def generar(self, resultado):
        raise OSError("disco lleno")


@pytest.fixture
def ctrl():
    return CalibracionController()


def test_arranca_en_datos(ctrl):
    assert ctrl.get_paso() == PasoCalibracion.DATOS
    assert ctrl.get_error_msg() is None
    assert ctrl.get_resultado() is None


def test_registrar_instrumento_calcula_ideales_y_avanza(ctrl):
    assert ctrl.registrar_instrumento(FORMULARIO) is True

    estado = ctrl.get_estado()
    assert ctrl.get_paso() == PasoCalibracion.MEDICIONES
    assert estado.ideales == (0, 25, 50, 75, 100)
    assert estado.umbral == pytest.approx(1.0)
    assert estado.instrumento.tag == "TT-200"


def test_rango_invalido_no_avanza(ctrl, caplog):
    with caplog.at_level(logging.WARNING):
        ok = ctrl.registrar_instrumento(dict(FORMULARIO, lrv="100", urv="0"))

    assert ok is False
    assert ctrl.get_paso() == PasoCalibracion.DATOS
    assert "LRV" in ctrl.get_error_msg()
    assert ctrl.get_estado().ideales == ()
    assert "rechazados" in caplog.text


def test_flujo_completo_aprobado(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    assert ctrl.validar_mediciones(MEDIDOS_OK) is True

    resultado = ctrl.get_resultado()
    assert ctrl.get_paso() == PasoCalibracion.RESULTADOS
    assert resultado.medidos == (0, 24, 51, 76, 100)
    assert resultado.errores == (0, 1, -1, -1, 0)
    assert resultado.aprobado is True
    assert resultado.ecuacion.pendiente == pytest.approx(0.16)
    assert resultado.ecuacion.intercepto == pytest.approx(4.0)


def test_flujo_completo_rechazado_con_umbral_menor(ctrl):
    ctrl.registrar_instrumento(dict(FORMULARIO, tolerancia="0.5"))
    ctrl.validar_mediciones(MEDIDOS_OK)

    assert ctrl.get_resultado().aprobado is False


def test_mediciones_incompletas_no_avanzan(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)

    assert ctrl.validar_mediciones(["0", "", "51", "76", "100"]) is False
    assert ctrl.get_paso() == PasoCalibracion.MEDICIONES
    assert "25%" in ctrl.get_error_msg()
    assert ctrl.get_estado().errores == ()


def test_mediciones_sin_instrumento_levanta(ctrl):
    with pytest.raises(RuntimeError):
        ctrl.validar_mediciones(MEDIDOS_OK)


def test_error_se_limpia_al_corregir(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(["", "", "", "", ""])
    assert ctrl.get_error_msg()

    ctrl.validar_mediciones(MEDIDOS_OK)
    assert ctrl.get_error_msg() is None


def test_nuevo_instrumento_descarta_resultados_previos(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)
    ctrl.volver_a_datos()

    ctrl.registrar_instrumento(dict(FORMULARIO, lrv="-10", urv="10"))
    estado = ctrl.get_estado()

    assert estado.ideales == (-10, -5, 0, 5, 10)
    assert estado.medidos == ()
    assert estado.errores == ()
    assert estado.aprobado is False


def test_volver_a_datos_conserva_instrumento(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.volver_a_datos()

    assert ctrl.get_paso() == PasoCalibracion.DATOS
    assert ctrl.get_estado().instrumento.tag == "TT-200"
    assert ctrl.get_resultado() is None


def test_generar_reporte_usa_la_salida(ctrl):
    salida = SalidaFalsa()
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)

    assert ctrl.generar_reporte(salida) == b"reporte"
    assert salida.recibidos[0].errores == (0, 1, -1, -1, 0)


def test_generar_reporte_sin_resultados_levanta(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    with pytest.raises(RuntimeError):
        ctrl.generar_reporte(SalidaFalsa())


def test_generar_reporte_propaga_fallo_de_la_salida(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)

    with pytest.raises(OSError):
        ctrl.generar_reporte(SalidaRota())
    assert ctrl.get_error_msg() == "Hubo un problema al generar el reporte."


def test_reset(ctrl):
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)
    ctrl.reset()

    assert ctrl.get_paso() == PasoCalibracion.DATOS
    assert ctrl.get_estado().instrumento is None
    assert ctrl.get_resultado() is None


def test_controller_usa_la_sesion_recibida():
    sesion = SesionCalibracion()
    ctrl = CalibracionController(sesion)
    ctrl.registrar_instrumento(FORMULARIO)

    assert sesion.leer().ideales == (0, 25, 50, 75, 100)


def test_fallo_de_calculo_en_mediciones_no_avanza(caplog):
    sesion = SesionCalibracion()
    ctrl = CalibracionController(sesion)
    ctrl.registrar_instrumento(FORMULARIO)

    # Ideales con otro largo: calcular_errores levanta LongitudNoCoincide
    sesion.fusionar(ideales=[1, 2])

    with caplog.at_level(logging.ERROR):
        assert ctrl.validar_mediciones(MEDIDOS_OK) is False

    assert ctrl.get_paso() == PasoCalibracion.MEDICIONES
    assert ctrl.get_error_msg() == "Ocurrio un error inesperado al validar los datos."
    assert ctrl.get_estado().errores == ()
    assert "Error en la validacion o calculo" in caplog.text
    assert any(r.exc_info and r.exc_info[0].__name__ == "LongitudNoCoincide" for r in caplog.records)


def test_generar_reporte_reusa_el_resultado_guardado(ctrl, caplog):
    salida = SalidaFalsa()
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)

    with caplog.at_level(logging.INFO):
        primero = ctrl.generar_reporte(salida)
        segundo = ctrl.generar_reporte(salida)

    assert primero == segundo == b"reporte"
    assert len(salida.recibidos) == 1
    assert caplog.text.count("generado") == 1


def test_reporte_se_regenera_con_mediciones_nuevas(ctrl):
    salida = SalidaFalsa()
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)
    ctrl.generar_reporte(salida)

    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(["0", "25", "50", "75", "100"])
    ctrl.generar_reporte(salida)

    assert len(salida.recibidos) == 2
    assert salida.recibidos[1].errores == (0, 0, 0, 0, 0)


def test_fallo_de_reporte_no_queda_guardado(ctrl):
    class SalidaIntermitente(SalidaFalsa):
        def generar(self, resultado):
            if not self.recibidos:
                self.recibidos.append(None)
                raise OSError("disco lleno")
            return super().generar(resultado)

    salida = SalidaIntermitente()
    ctrl.registrar_instrumento(FORMULARIO)
    ctrl.validar_mediciones(MEDIDOS_OK)

    with pytest.raises(OSError):
        ctrl.generar_reporte(salida)
    assert ctrl.generar_reporte(salida) == b"reporte"
    assert len(salida.recibidos) == 2
