"""
Este modulo define las salidas de reporte para el controller.

Una salida de reporte recibe un ResultadoCalibracion y entrega bytes listos para descargar:
- ReportePDF: reporte imprimible (reportlab) con tablas, veredicto, ecuacion y grafico.
- ReporteCSV: tabla de 5 puntos (pandas), util para planillas.

Idea de arquitectura:
- El Controller solo conoce el contrato SalidaReporte.generar().
- Asi el motor y el controller se prueban sin ninguna dependencia de render.
"""

import io
import re
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from calibrador_420.config.settings import SETTINGS
from calibrador_420.model.calibracion import porcentajes_span, puntos_dentro_de_tolerancia
from calibrador_420.model.instrumento import ResultadoCalibracion, TipoTolerancia
from calibrador_420.view.graficos import imagen_linealidad, tabla_resultados


# ============================================================
# 0) CONTRATO BASE (interfaz)
# ============================================================

class SalidaReporte:
    """
    Contrato que deben cumplir todas las salidas de reporte.

    - generar(resultado) -> bytes
    - extension / mime: para el boton de descarga
    """

    extension = ""
    mime = "application/octet-stream"

    def generar(self, resultado: ResultadoCalibracion) -> bytes:
        raise NotImplementedError

    def nombre_archivo(self, resultado: ResultadoCalibracion) -> str:
        tag = resultado.instrumento.tag or "SIN_TAG"
        tag = re.sub(r"[^A-Za-z0-9_.-]+", "_", tag)
        return f"{SETTINGS.prefijo_reporte}_{tag}.{self.extension}"


# ============================================================
# 1) CSV
# ============================================================

class ReporteCSV(SalidaReporte):
    extension = "csv"
    mime = "text/csv"

    def generar(self, resultado: ResultadoCalibracion) -> bytes:
        df = tabla_resultados(resultado)
        return df.to_csv(index=False).encode("utf-8")


# ============================================================
# 2) PDF
# ============================================================

def _rgb(color) -> tuple:
    return tuple(c / 255.0 for c in color)


def _fmt(valor: float) -> str:
    # 6 cifras significativas, sin ceros de relleno
    return f"{valor:.6g}"


def texto_tolerancia(resultado: ResultadoCalibracion) -> str:
    inst = resultado.instrumento
    umbral = f"± {resultado.umbral:.{SETTINGS.decimales_umbral}f} {inst.unidad}".rstrip()
    if inst.tipo_tolerancia == TipoTolerancia.PORCENTAJE:
        return f"{umbral} ({_fmt(inst.tolerancia)}%)"
    return umbral


class ReportePDF(SalidaReporte):
    """
    Reporte carta (letter) en 4 secciones:
    1. Datos del ensayo
    2. Resultados de la prueba de 5 puntos (error en verde/rojo)
    3. Conclusion + ecuacion de la curva 4-20 mA
    4. Grafico de linealidad
    Al pie: firma del tecnico y nota de validez.
    """

    extension = "pdf"
    mime = "application/pdf"

    alto_fila = 16.0

    def __init__(self, incluir_grafico: bool = True, fecha: Optional[datetime] = None):
        self.incluir_grafico = incluir_grafico
        self.fecha = fecha

    def generar(self, resultado: ResultadoCalibracion) -> bytes:
        buffer = io.BytesIO()
        p = canvas.Canvas(buffer, pagesize=letter)
        ancho, alto = letter
        x0 = SETTINGS.margen_pt
        ancho_util = ancho - 2 * x0

        # --- Encabezado ---
        p.setTitle(f"Reporte de Calibracion {resultado.instrumento.tag}".strip())
        p.setFont("Helvetica-Bold", 18)
        p.drawCentredString(ancho / 2, alto - 45, "Reporte de Calibracion de Instrumento")
        p.setFont("Helvetica", 9)
        fecha = self.fecha or datetime.now()
        p.drawCentredString(ancho / 2, alto - 60, f"Fecha: {fecha.strftime('%Y-%m-%d %H:%M')}")

        # --- 1. Datos del ensayo ---
        y = alto - 90
        y = self._titulo_seccion(p, x0, y, "1. Datos del Ensayo")
        inst = resultado.instrumento
        filas = [
            ["TAG", inst.tag],
            ["Marca", inst.marca],
            ["Modelo", inst.modelo],
            ["Alimentacion", inst.alimentacion],
            ["Rango", f"{_fmt(inst.lrv)} a {_fmt(inst.urv)} {inst.unidad}".rstrip()],
            ["Tolerancia Aceptada", texto_tolerancia(resultado)],
            ["Equipo de Calibracion", inst.calibrador],
            ["Tecnico", inst.tecnico],
        ]
        y = self._tabla(p, x0, y, [ancho_util * 0.35, ancho_util * 0.65], ["Parametro", "Valor"], filas, rayado=True)

        # --- 2. Resultados ---
        y = self._titulo_seccion(p, x0, y - 14, "2. Resultados de la Prueba de 5 Puntos")
        u = inst.unidad
        encabezado = ["Punto", f"Ideal ({u})", f"Medido ({u})", f"Error ({u})"]
        filas = [
            [f"{pct}%", _fmt(ideal), _fmt(medido), _fmt(error)]
            for pct, ideal, medido, error in zip(
                porcentajes_span(), resultado.ideales, resultado.medidos, resultado.errores
            )
        ]
        ok = puntos_dentro_de_tolerancia(resultado.errores, resultado.umbral)

        def color_error(fila: int, col: int):
            if col != 3:
                return None
            return SETTINGS.color_ok if ok[fila] else SETTINGS.color_falla

        y = self._tabla(p, x0, y, [ancho_util / 4] * 4, encabezado, filas, color_celda=color_error)

        # --- 3. Conclusion ---
        y = self._titulo_seccion(p, x0, y - 14, "3. Conclusion")
        p.setFont("Helvetica-Bold", 11)
        p.setFillColorRGB(*_rgb(SETTINGS.color_ok if resultado.aprobado else SETTINGS.color_falla))
        p.drawString(x0, y - 4, f"Resultado: {'APROBADO' if resultado.aprobado else 'RECHAZADO'}")
        p.setFillColorRGB(0, 0, 0)
        y -= 24

        # --- Ecuacion ---
        p.setFont("Courier-Bold", 9)
        p.drawString(x0, y, "Ecuacion de la curva 4-20mA:")
        p.drawCentredString(ancho / 2, y - 13, resultado.ecuacion.texto)
        y -= 32

        # --- 4. Grafico ---
        if self.incluir_grafico:
            alto_img = SETTINGS.alto_grafico_pt
            if y - alto_img - 20 < 100:
                p.showPage()
                y = alto - SETTINGS.margen_pt
            y = self._titulo_seccion(p, x0, y, "4. Grafico de Linealidad")
            imagen = ImageReader(io.BytesIO(imagen_linealidad(resultado)))
            p.drawImage(imagen, x0, y - alto_img, width=ancho_util, height=alto_img, preserveAspectRatio=True)

        # --- Firma y pie de pagina (siempre al final) ---
        p.setFillColorRGB(0, 0, 0)
        p.setFont("Helvetica", 10)
        p.drawString(x0, 85, "_________________________")
        p.drawString(x0, 70, f"Firma del Tecnico: {inst.tecnico}")
        p.setFont("Helvetica", 8)
        p.setFillColorRGB(0.4, 0.4, 0.4)
        p.drawCentredString(
            ancho / 2,
            28,
            "La validez de este reporte esta sujeta a las condiciones del instrumento al momento de la prueba.",
        )

        p.showPage()
        p.save()
        return buffer.getvalue()

    # ----------------------------
    # Helpers de dibujo
    # ----------------------------

    def _titulo_seccion(self, p, x: float, y: float, titulo: str) -> float:
        p.setFillColorRGB(0, 0, 0)
        p.setFont("Helvetica-Bold", 12)
        p.drawString(x, y, titulo)
        return y - 8

    def _tabla(
        self,
        p,
        x: float,
        y: float,
        anchos: Sequence[float],
        encabezado: List[str],
        filas: List[List[str]],
        rayado: bool = False,
        color_celda: Optional[Callable[[int, int], Optional[tuple]]] = None,
    ) -> float:
        h = self.alto_fila
        ancho_total = sum(anchos)

        # encabezado
        y -= h
        p.setFillColorRGB(*_rgb(SETTINGS.color_encabezado))
        p.rect(x, y, ancho_total, h, stroke=0, fill=1)
        p.setFillColorRGB(1, 1, 1)
        p.setFont("Helvetica-Bold", 9)
        cx = x
        for texto, w in zip(encabezado, anchos):
            p.drawString(cx + 4, y + 5, str(texto))
            cx += w

        # cuerpo
        p.setFont("Helvetica", 9)
        for i, fila in enumerate(filas):
            y -= h
            if rayado and i % 2 == 1:
                p.setFillColorRGB(0.94, 0.94, 0.94)
                p.rect(x, y, ancho_total, h, stroke=0, fill=1)

            cx = x
            for j, (texto, w) in enumerate(zip(fila, anchos)):
                color = color_celda(i, j) if color_celda else None
                if color is not None:
                    p.setFillColorRGB(*_rgb(color))
                    p.rect(cx, y, w, h, stroke=0, fill=1)
                    p.setFillColorRGB(1, 1, 1)
                else:
                    p.setFillColorRGB(0, 0, 0)
                p.drawString(cx + 4, y + 5, str(texto))
                cx += w

            p.setStrokeColorRGB(0.8, 0.8, 0.8)
            p.line(x, y, x + ancho_total, y)

        p.setFillColorRGB(0, 0, 0)
        return y
