"""
Tablas y graficos de resultados

- DataFrames (pandas) para st.dataframe / st.line_chart y para exportar CSV.
- Imagen PNG (matplotlib, backend Agg) del grafico de linealidad para el PDF.

Esta capa solo lee ResultadoCalibracion; no calcula nada que no venga del motor.
"""

import io

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from calibrador_420.config.settings import SETTINGS  # noqa: E402
from calibrador_420.model.calibracion import (  # noqa: E402
    corriente_esperada,
    porcentajes_span,
    puntos_dentro_de_tolerancia,
)
from calibrador_420.model.instrumento import EcuacionLineal, ResultadoCalibracion  # noqa: E402


def etiquetas_puntos():
    return [f"{pct}%" for pct in porcentajes_span()]


def tabla_resultados(resultado: ResultadoCalibracion) -> pd.DataFrame:
    """Tabla de 5 filas: punto, ideal, medido, error, mA esperado y estado."""
    ok = puntos_dentro_de_tolerancia(resultado.errores, resultado.umbral)

    return pd.DataFrame(
        {
            "punto": etiquetas_puntos(),
            "ideal": list(resultado.ideales),
            "medido": list(resultado.medidos),
            "error": list(resultado.errores),
            "corriente_mA": [corriente_esperada(resultado.ecuacion, v) for v in resultado.ideales],
            "dentro_tolerancia": list(ok),
        }
    )


def df_linealidad(resultado: ResultadoCalibracion) -> pd.DataFrame:
    """Ideal vs medido indexado por punto (para st.line_chart)."""
    df = pd.DataFrame(
        {
            "Valores Ideales": list(resultado.ideales),
            "Valores Medidos": list(resultado.medidos),
        },
        index=etiquetas_puntos(),
    )
    df.index.name = "Punto"
    return df


def df_curva_420(ecuacion: EcuacionLineal, lrv: float, urv: float, n: int = 21) -> pd.DataFrame:
    """Recta ideal PV -> mA entre LRV y URV."""
    if n < 2:
        n = 2
    paso = (urv - lrv) / (n - 1)
    pv = [lrv + i * paso for i in range(n)]

    df = pd.DataFrame({"Corriente (mA)": [corriente_esperada(ecuacion, v) for v in pv]}, index=pv)
    df.index.name = "PV"
    return df


def figura_linealidad(resultado: ResultadoCalibracion, dpi: int = 150):
    """
    Figura ideal vs medido. El eje x es la posicion del punto (0..4) y las
    etiquetas son los valores ideales, asi dos ideales que redondean igual
    no se superponen.
    """
    unidad = resultado.instrumento.unidad
    posiciones = list(range(len(resultado.ideales)))
    etiquetas = [f"{v:.{SETTINGS.decimales_tabla}f} {unidad}".strip() for v in resultado.ideales]

    fig, ax = plt.subplots(figsize=(8, 3), dpi=dpi)
    ax.plot(posiciones, list(resultado.ideales), marker="o", linestyle="-", label="Valores Ideales")
    ax.plot(posiciones, list(resultado.medidos), marker="s", linestyle="--", label="Valores Medidos")
    ax.set_xticks(posiciones)
    ax.set_xticklabels(etiquetas)
    ax.set_xlabel("Punto ideal")
    ax.set_ylabel(f"PV ({unidad})" if unidad else "PV")
    ax.set_title("Grafico de Linealidad")
    ax.grid(True, linewidth=0.5, alpha=0.5)
    ax.legend(loc="best", fontsize=8)
    fig.tight_layout()
    return fig


def imagen_linealidad(resultado: ResultadoCalibracion, dpi: int = 150) -> bytes:
    """Grafico de linealidad como PNG (bytes) para incrustar en el reporte."""
    fig = figura_linealidad(resultado, dpi=dpi)
    try:
        buf = io.BytesIO()
        fig.savefig(buf, format="png")
    finally:
        plt.close(fig)
    return buf.getvalue()
