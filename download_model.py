"""
Script to download and extract the Vosk Spanish model used for recognition
"""

import os
import sys
import zipfile
import argparse
import requests
from tqdm import tqdm

MODEL_NAME = "vosk-model-small-es-0.42"
MODEL_URL = f"https://alphacephei.com/vosk/models/{MODEL_NAME}.zip"
MODEL_DIR = os.path.join("assets", "models")


def download_file(url, destination):
    """Download a file with progress bar"""
    response = requests.get(url, stream=True, timeout=60)
    response.raise_for_status()
    total_size = int(response.headers.get('content-length', 0))

    with open(destination, 'wb') as file, tqdm(
        desc=os.path.basename(destination),
        total=total_size,
        unit='iB',
        unit_scale=True,
        unit_divisor=1024,
    ) as bar:
        for data in response.iter_content(chunk_size=1024):
            size = file.write(data)
            bar.update(size)


def download_model(url=MODEL_URL, model_dir=MODEL_DIR):
    """Download and extract the Vosk model. Returns True on success."""
    os.makedirs(model_dir, exist_ok=True)

    name = os.path.splitext(os.path.basename(url))[0]
    model_path = os.path.join(model_dir, name)
    zip_path = model_path + ".zip"

    if os.path.exists(model_path):
        print(f"Model already exists at {model_path}")
        return True

    print(f"Downloading Vosk model from {url}")
    try:
        download_file(url, zip_path)
        print("Extracting model...")

        with zipfile.ZipFile(zip_path, 'r') as zip_ref:
            bad = zip_ref.testzip()
            if bad:
                raise zipfile.BadZipFile(f"Corrupt file detected: {bad}")
            zip_ref.extractall(model_dir)

        os.remove(zip_path)
        print(f"Model successfully downloaded and extracted to {model_path}")
        print("Point VOSK_MODEL_PATH at it if you use another location")
        return True

    except (requests.RequestException, zipfile.BadZipFile, OSError) as e:
        print(f"Error downloading model: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Download the Vosk Spanish model")
    parser.add_argument("--url", help="Custom model URL", default=MODEL_URL)
    parser.add_argument("--dir", help="Target directory", default=MODEL_DIR)
    args = parser.parse_args()

    success = download_model(args.url, args.dir)
    sys.exit(0 if success else 1)
