"""
Controller del calibrador (capa Controller del patron MVC)

Coordina el flujo de 3 pasos:
- DATOS:       formulario del instrumento -> puntos ideales
- MEDICIONES:  5 valores medidos -> errores, veredicto y ecuacion
- RESULTADOS:  resumen, graficos y reporte descargable

Contrato con la View:
- ctrl.registrar_instrumento(formulario) -> bool
- ctrl.validar_mediciones(textos) -> bool
- ctrl.volver_a_datos()
- ctrl.generar_reporte(salida) -> bytes
- ctrl.reset()
- ctrl.get_paso() / get_estado() / get_resultado() / get_error_msg()

Nota:
- El controller es duenio de la SesionCalibracion; no hay estado global.
- Si una validacion falla, el paso no avanza y el mensaje queda en get_error_msg().
"""

import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple

from calibrador_420.controller.validacion import (
    ErrorValidacion,
    construir_instrumento,
    validar_mediciones as convertir_mediciones,
)
from calibrador_420.model.calibracion import (
    calcular_ecuacion_lineal,
    calcular_errores,
    calcular_puntos_ideales,
    umbral_desde_tolerancia,
    verificar_aprobacion,
)
from calibrador_420.model.estado import EstadoCalibracion, SesionCalibracion
from calibrador_420.model.instrumento import ResultadoCalibracion

logger = logging.getLogger(__name__)


class PasoCalibracion(Enum):
    DATOS = "DATOS"
    MEDICIONES = "MEDICIONES"
    RESULTADOS = "RESULTADOS"


class CalibracionController:
    def __init__(self, sesion: Optional[SesionCalibracion] = None):
        self._sesion = sesion if sesion is not None else SesionCalibracion()
        self._paso = PasoCalibracion.DATOS
        self._error_msg: Optional[str] = None
        self._reportes: Dict[Tuple[str, ResultadoCalibracion], bytes] = {}

    # ----------------------------
    # Getters
    # ----------------------------

    def get_paso(self) -> PasoCalibracion:
        return self._paso

    def get_estado(self) -> EstadoCalibracion:
        return self._sesion.leer()

    def get_error_msg(self) -> Optional[str]:
        return self._error_msg

    def get_resultado(self) -> Optional[ResultadoCalibracion]:
        """Resultado completo para reportes; None si aun no se validaron mediciones."""
        if self._paso != PasoCalibracion.RESULTADOS:
            return None

        estado = self._sesion.leer()
        return ResultadoCalibracion(
            instrumento=estado.instrumento,
            ideales=estado.ideales,
            medidos=estado.medidos,
            errores=estado.errores,
            umbral=estado.umbral,
            aprobado=estado.aprobado,
            ecuacion=estado.ecuacion,
        )

    # ----------------------------
    # Paso 1: datos del instrumento
    # ----------------------------

    def registrar_instrumento(self, formulario: Mapping) -> bool:
        try:
            instrumento = construir_instrumento(formulario)
        except ErrorValidacion as e:
            logger.warning("Datos de instrumento rechazados: %s", e)
            self._error_msg = str(e)
            return False

        ideales = calcular_puntos_ideales(instrumento.lrv, instrumento.urv)
        umbral = umbral_desde_tolerancia(
            instrumento.tolerancia, instrumento.lrv, instrumento.urv, instrumento.tipo_tolerancia
        )

        # Instrumento nuevo: todo lo derivado se descarta
        self._sesion.reiniciar()
        self._reportes.clear()
        self._sesion.fusionar(instrumento=instrumento, ideales=ideales, umbral=umbral)

        self._error_msg = None
        self._paso = PasoCalibracion.MEDICIONES
        logger.info(
            "Instrumento %s registrado (rango %s a %s %s, umbral %.4f)",
            instrumento.tag or "-", instrumento.lrv, instrumento.urv, instrumento.unidad, umbral,
        )
        return True

    # ----------------------------
    # Paso 2: mediciones
    # ----------------------------

    def validar_mediciones(self, textos: Sequence) -> bool:
        if self._paso == PasoCalibracion.DATOS:
            raise RuntimeError("Primero registre los datos del instrumento.")

        try:
            medidos = convertir_mediciones(textos)
        except ErrorValidacion as e:
            logger.warning("Mediciones rechazadas: %s", e)
            self._error_msg = str(e)
            return False

        estado = self._sesion.leer()
        try:
            errores = calcular_errores(estado.ideales, medidos)
            aprobado = verificar_aprobacion(errores, estado.umbral)
            ecuacion = calcular_ecuacion_lineal(estado.instrumento.lrv, estado.instrumento.urv)
        except Exception:
            logger.exception("Error en la validacion o calculo")
            self._error_msg = "Ocurrio un error inesperado al validar los datos."
            return False

        self._sesion.fusionar(medidos=medidos, errores=errores, aprobado=aprobado, ecuacion=ecuacion)

        self._error_msg = None
        self._paso = PasoCalibracion.RESULTADOS
        logger.info("Calibracion %s", "APROBADA" if aprobado else "RECHAZADA")
        return True

    # ----------------------------
    # Paso 3: reporte / navegacion
    # ----------------------------

    def generar_reporte(self, salida) -> bytes:
        """
        Ejecuta una salida de reporte (ver view/reportes.py) sobre el resultado actual.

        El resultado se guarda por tipo de salida: mientras el resultado no cambie,
        la misma salida no se vuelve a generar.

        Errores:
        - RuntimeError si todavia no hay resultados
        """
        resultado = self.get_resultado()
        if resultado is None:
            raise RuntimeError("No hay resultados de calibracion para reportar.")

        clave = (type(salida).__name__, resultado)
        if clave in self._reportes:
            return self._reportes[clave]

        try:
            data = salida.generar(resultado)
        except Exception:
            logger.exception("Error al generar el reporte")
            self._error_msg = "Hubo un problema al generar el reporte."
            raise

        self._reportes[clave] = data
        logger.info("Reporte %s generado (%d bytes)", salida.nombre_archivo(resultado), len(data))
        return data

    def volver_a_datos(self) -> None:
        self._error_msg = None
        self._paso = PasoCalibracion.DATOS

    def reset(self) -> None:
        self._sesion.reiniciar()
        self._reportes.clear()
        self._error_msg = None
        self._paso = PasoCalibracion.DATOS
        logger.info("Sesion reiniciada")
