import os
import qrcode
from certivo.core.config import settings


QR_CODE_DIR = settings.static_dir / "qrcodes"
STATIC_URL_PREFIX = "/static/qrcodes"


def generate_and_save_qr(data: str, filename: str) -> str:
    """
    Renders a QR code for `data` into static/qrcodes/<filename>.png
    and returns its public URL. Existing images are reused.
    """
    os.makedirs(QR_CODE_DIR, exist_ok=True)

    file_path = QR_CODE_DIR / f"{filename}.png"

    if not file_path.exists():
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        img.save(file_path)

    return f"{settings.public_url}{STATIC_URL_PREFIX}/{filename}.png"
