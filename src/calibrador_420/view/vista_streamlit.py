"""
Vista Streamlit para el Calibrador 4-20 mA (MVC)

Esta vista NO implementa el motor ni la logica de calibracion.
Solo:
- captura el formulario del instrumento y las 5 mediciones
- ejecuta el flujo de 3 pasos via CalibracionController
- muestra tablas, graficos y botones de descarga del reporte

Contrato con Controller:
- ctrl.registrar_instrumento(formulario)
- ctrl.validar_mediciones(textos)
- ctrl.volver_a_datos()
- ctrl.generar_reporte(salida)
- ctrl.reset()
- ctrl.get_paso() / get_estado() / get_resultado() / get_error_msg()
"""

from datetime import date

import streamlit as st

from calibrador_420.config.settings import SETTINGS
from calibrador_420.controller.controller import CalibracionController, PasoCalibracion
from calibrador_420.controller.validacion import EntradaNoNumerica, RangoInvalido, a_numero, validar_rango
from calibrador_420.model.calibracion import porcentajes_span, puntos_dentro_de_tolerancia
from calibrador_420.model.instrumento import TipoTolerancia
from calibrador_420.view.graficos import df_curva_420, df_linealidad, tabla_resultados
from calibrador_420.view.reportes import ReporteCSV, ReportePDF, texto_tolerancia


# ============================================================
# Helpers de session_state
# ============================================================

def _get_ctrl() -> CalibracionController:
    ctrl = st.session_state.get("ctrl")
    if ctrl is None:
        ctrl = CalibracionController()
        st.session_state["ctrl"] = ctrl
    return ctrl


def _limpiar_inputs():
    for clave in list(st.session_state.keys()):
        if clave.startswith("inp_") or clave.startswith("med_"):
            del st.session_state[clave]
    st.session_state.pop("reportes_pedidos", None)


# ============================================================
# Helpers de tablas
# ============================================================

def _colorear_error(ok: bool) -> str:
    color = SETTINGS.color_ok if ok else SETTINGS.color_falla
    return f"background-color: rgb{color}; color: white"


def _tabla_coloreada(resultado):
    df = tabla_resultados(resultado)
    ok = list(df["dentro_tolerancia"])
    d = SETTINGS.decimales_tabla

    return (
        df.drop(columns=["dentro_tolerancia"])
        .style.format({"ideal": f"{{:.{d}f}}", "medido": f"{{:.{d}f}}", "error": f"{{:.{d}f}}", "corriente_mA": "{:.3f}"})
        .apply(lambda col: [_colorear_error(v) for v in ok], subset=["error"])
    )


# ============================================================
# Pasos
# ============================================================

def _chequeo_rango(lrv_texto, urv_texto):
    # Aviso en vivo mientras se escribe; la validacion que bloquea esta en el controller
    try:
        validar_rango(a_numero(lrv_texto, "LRV"), a_numero(urv_texto, "URV"))
    except EntradaNoNumerica:
        return
    except RangoInvalido as e:
        st.warning(str(e))


def _paso_datos(ctrl: CalibracionController):
    st.subheader("Paso 1: Datos del instrumento")

    with st.container():
        c1, c2 = st.columns(2)
        with c1:
            tag = st.text_input("TAG", key="inp_tag")
            marca = st.text_input("Marca", key="inp_marca")
            modelo = st.text_input("Modelo", key="inp_modelo")
            alimentacion = st.text_input("Alimentacion", value="24 VDC", key="inp_alimentacion")
            calibrador = st.text_input("Equipo de calibracion", key="inp_calibrador")
        with c2:
            lrv = st.text_input("Valor Minimo (LRV)", value="0", key="inp_lrv")
            urv = st.text_input("Valor Maximo (URV)", value="100", key="inp_urv")
            unidad = st.text_input("Unidad", value=SETTINGS.unidad_default, key="inp_unidad")
            tipo = st.selectbox(
                "Tipo de tolerancia",
                [TipoTolerancia.PORCENTAJE.value, TipoTolerancia.ABSOLUTA.value],
                format_func=lambda v: "% del span" if v == TipoTolerancia.PORCENTAJE.value else "Absoluta (unidades PV)",
                key="inp_tipo_tolerancia",
            )
            tolerancia = st.text_input("Tolerancia", value=str(SETTINGS.tolerancia_default), key="inp_tolerancia")
            tecnico = st.text_input("Tecnico", key="inp_tecnico")

        _chequeo_rango(lrv, urv)

    enviado = st.button("Calcular puntos ideales", type="primary")

    if enviado:
        formulario = {
            "tag": tag,
            "marca": marca,
            "modelo": modelo,
            "alimentacion": alimentacion,
            "calibrador": calibrador,
            "lrv": lrv,
            "urv": urv,
            "unidad": unidad,
            "tipo_tolerancia": tipo,
            "tolerancia": tolerancia,
            "tecnico": tecnico,
        }
        if ctrl.registrar_instrumento(formulario):
            st.rerun()
        st.error(ctrl.get_error_msg())


def _paso_mediciones(ctrl: CalibracionController):
    st.subheader("Paso 2: Mediciones de campo")

    estado = ctrl.get_estado()
    inst = estado.instrumento
    d = SETTINGS.decimales_tabla

    st.caption(
        f"TAG {inst.tag or '-'} | Rango {inst.lrv} a {inst.urv} {inst.unidad} | "
        f"Umbral de error ± {estado.umbral:.{SETTINGS.decimales_umbral}f} {inst.unidad}"
    )

    cols = st.columns(SETTINGS.n_puntos)
    textos = []
    for col, pct, ideal in zip(cols, porcentajes_span(), estado.ideales):
        with col:
            st.metric(f"Ideal {pct}%", f"{ideal:.{d}f} {inst.unidad}")
            textos.append(st.text_input(f"Medido {pct}%", key=f"med_{pct}"))

    b_validar, b_volver = st.columns([1, 1])
    with b_validar:
        if st.button("Validar calibracion", type="primary"):
            if ctrl.validar_mediciones(textos):
                st.rerun()
            st.error(ctrl.get_error_msg())
    with b_volver:
        if st.button("Volver a datos"):
            ctrl.volver_a_datos()
            st.rerun()


def _paso_resultados(ctrl: CalibracionController):
    st.subheader("Paso 3: Resultados")

    resultado = ctrl.get_resultado()
    inst = resultado.instrumento

    c1, c2, c3 = st.columns(3)
    c1.metric("TAG", inst.tag or "-")
    c2.metric("Resultado", "APROBADO" if resultado.aprobado else "RECHAZADO")
    c3.metric("Fecha", date.today().strftime("%Y-%m-%d"))

    if resultado.aprobado:
        st.success("Todos los puntos estan dentro de la tolerancia: " + texto_tolerancia(resultado))
    else:
        fuera = [
            f"{pct}%"
            for pct, ok in zip(porcentajes_span(), puntos_dentro_de_tolerancia(resultado.errores, resultado.umbral))
            if not ok
        ]
        st.error("Puntos fuera de tolerancia: " + ", ".join(fuera))

    if resultado.ecuacion.texto:
        st.code(resultado.ecuacion.texto, language=None)

    st.dataframe(_tabla_coloreada(resultado), hide_index=True)

    g1, g2 = st.columns(2)
    with g1:
        st.write("Linealidad: ideal vs medido")
        st.line_chart(df_linealidad(resultado))
    with g2:
        st.write("Curva 4-20 mA")
        if resultado.ecuacion.valida:
            st.line_chart(df_curva_420(resultado.ecuacion, inst.lrv, inst.urv))
        else:
            st.info(resultado.ecuacion.texto)

    # Reportes
    st.divider()
    # Cada reporte se arma solo despues de pedirlo; el controller guarda los bytes
    pedidos = st.session_state.setdefault("reportes_pedidos", set())
    for salida, etiqueta in [(ReportePDF(), "Descargar reporte PDF"), (ReporteCSV(), "Descargar CSV")]:
        clave = (salida.extension, resultado)
        if clave not in pedidos:
            if not st.button(f"Generar {salida.extension.upper()}", key=f"gen_{salida.extension}"):
                continue
            pedidos.add(clave)

        with st.spinner("Generando reporte..."):
            try:
                data = ctrl.generar_reporte(salida)
            except Exception:
                st.error(ctrl.get_error_msg() or "Hubo un problema al generar el reporte.")
                pedidos.discard(clave)
                continue
        st.download_button(
            etiqueta,
            data=data,
            file_name=salida.nombre_archivo(resultado),
            mime=salida.mime,
        )

    b_volver, b_reset = st.columns([1, 1])
    with b_volver:
        if st.button("Volver a datos"):
            ctrl.volver_a_datos()
            st.rerun()
    with b_reset:
        if st.button("Nueva calibracion"):
            ctrl.reset()
            _limpiar_inputs()
            st.rerun()


# ============================================================
# UI principal
# ============================================================

def iniciar():
    st.set_page_config(page_title=SETTINGS.titulo_app, layout="wide")

    st.title(SETTINGS.titulo_app)
    st.caption("Calibracion de 5 puntos (0, 25, 50, 75, 100 %) de instrumentos 4-20 mA")

    ctrl = _get_ctrl()
    paso = ctrl.get_paso()

    # ------------------------------
    # Sidebar: progreso
    # ------------------------------
    st.sidebar.header("Progreso")
    for i, p in enumerate(PasoCalibracion, start=1):
        marca = "▶" if p == paso else " "
        st.sidebar.write(f"{marca} {i}. {p.value.capitalize()}")

    if st.sidebar.button("Reset"):
        ctrl.reset()
        _limpiar_inputs()
        st.rerun()

    if paso == PasoCalibracion.DATOS:
        _paso_datos(ctrl)
    elif paso == PasoCalibracion.MEDICIONES:
        _paso_mediciones(ctrl)
    else:
        _paso_resultados(ctrl)


if __name__ == "__main__":
    iniciar()
