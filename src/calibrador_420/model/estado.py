"""
Estado de la sesion de calibracion

- EstadoCalibracion: registro inmutable con la "generacion" actual de datos
  (instrumento, ideales, medidos, errores, umbral, veredicto, ecuacion).
- SesionCalibracion: contenedor que es duenio de un EstadoCalibracion y lo
  reemplaza completo en cada actualizacion.

No hay estado global de modulo: quien necesite la sesion la recibe
(el Controller la crea, la View la guarda en st.session_state).
Aqui no vive ninguna validacion.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from calibrador_420.model.instrumento import DatosInstrumento, EcuacionLineal


def _ecuacion_vacia() -> EcuacionLineal:
    return EcuacionLineal(pendiente=0.0, intercepto=0.0, texto="")


@dataclass(frozen=True)
class EstadoCalibracion:
    instrumento: Optional[DatosInstrumento] = None
    ideales: Tuple[float, ...] = ()
    medidos: Tuple[float, ...] = ()
    errores: Tuple[float, ...] = ()
    umbral: float = 0.0
    aprobado: bool = False
    ecuacion: EcuacionLineal = field(default_factory=_ecuacion_vacia)


class SesionCalibracion:
    """
    Contenedor de estado con semantica de valor.

    - leer() entrega una copia independiente
    - fusionar(**cambios) mezcla (shallow) los campos indicados
    - reiniciar() vuelve a los valores por defecto
    """

    def __init__(self, estado: Optional[EstadoCalibracion] = None):
        self._estado = estado if estado is not None else EstadoCalibracion()

    def leer(self) -> EstadoCalibracion:
        return replace(self._estado)

    def fusionar(self, **cambios) -> EstadoCalibracion:
        """
        Reemplaza solo los campos indicados y retorna el nuevo estado.

        Secuencias se guardan como tuplas para que nadie pueda mutarlas
        desde afuera. Un nombre de campo desconocido levanta TypeError.
        """
        for nombre in ("ideales", "medidos", "errores"):
            if nombre in cambios:
                cambios[nombre] = tuple(float(v) for v in cambios[nombre])

        self._estado = replace(self._estado, **cambios)
        return self.leer()

    def reiniciar(self) -> None:
        self._estado = EstadoCalibracion()
