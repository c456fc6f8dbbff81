"""
Arranque del Calibrador 4-20 mA.

El tecnico abre la app con:
    streamlit run src/calibrador_420/main.py

Con el paquete instalado (pip install -e .) el ajuste de sys.path no hace falta,
pero se deja para poder abrir la app directo desde una copia del repo.
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)


def _carpeta_src() -> str:
    # main.py esta en src/calibrador_420/, la raiz de imports es src/
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _asegurar_src_en_syspath() -> None:
    src_dir = _carpeta_src()
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)


def configurar_logging(nivel: str = "INFO") -> None:
    """Log a consola con fecha y nivel; un nivel desconocido cae en INFO."""
    logging.basicConfig(
        level=getattr(logging, nivel.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def main() -> None:
    _asegurar_src_en_syspath()

    from calibrador_420.config.settings import SETTINGS
    from calibrador_420.view.vista_streamlit import iniciar

    configurar_logging(SETTINGS.log_level)
    logger.debug("Abriendo %s", SETTINGS.titulo_app)
    iniciar()


if __name__ == "__main__":
    # Con "python main.py" la UI no se sirve; solo streamlit la muestra en el navegador
    if "streamlit" not in " ".join(sys.argv).lower():
        print("Abrir la app con: streamlit run src/calibrador_420/main.py")

    main()
