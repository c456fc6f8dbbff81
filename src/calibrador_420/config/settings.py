"""
Configuracion central del Calibrador 4-20 mA.

Idea:
- Aqui van los parametros fijos del sistema (lazo 4-20 mA, formato numerico, reporte).
- El Controller y el modelo leen la convencion del lazo desde aqui.
- La View usa estos valores como defaults de los inputs y para el formato del reporte.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    # -------------------------------
    # Lazo de corriente (convencion 4-20 mA)
    # -------------------------------
    ma_min: float = 4.0              # corriente en LRV (mA)
    ma_max: float = 20.0             # corriente en URV (mA)
    n_puntos: int = 5                # puntos de calibracion: 0, 25, 50, 75, 100 %

    # -------------------------------
    # Formato numerico
    # -------------------------------
    decimales_ecuacion: int = 5      # precision fija del texto de la ecuacion
    decimales_tabla: int = 2         # precision de ideales/errores en pantalla
    decimales_umbral: int = 3        # precision de la tolerancia en el reporte

    # -------------------------------
    # Defaults del formulario
    # -------------------------------
    unidad_default: str = "%"
    tolerancia_default: float = 0.5          # en % del span
    tipo_tolerancia_default: str = "PORCENTAJE"

    # -------------------------------
    # Reporte PDF (reportlab, unidades en puntos)
    # -------------------------------
    margen_pt: float = 40.0
    alto_grafico_pt: float = 170.0
    color_encabezado: tuple = (42, 56, 76)
    color_ok: tuple = (40, 167, 69)
    color_falla: tuple = (220, 53, 69)
    prefijo_reporte: str = "Reporte_Calibracion"

    # -------------------------------
    # Aplicacion
    # -------------------------------
    titulo_app: str = "Calibrador 4-20 mA"
    log_level: str = "INFO"


# Instancia global utilizada por el resto del proyecto
SETTINGS = Settings()
