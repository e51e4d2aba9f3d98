from typing import Optional

from dotenv import find_dotenv, load_dotenv


def load_env(path: Optional[str] = None) -> bool:
    """
    Load .env into os.environ before src.api.settings is imported.
    Real environment variables win over the file. Returns False if no file was found.
    """
    return load_dotenv(path or find_dotenv(usecwd=True), override=False)
