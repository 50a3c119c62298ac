from pathlib import Path

from typing import Tuple, Union

import numpy as np

import soundfile as sf



def load_audio(path: Union[str, Path]) -> Tuple[np.ndarray, int]:
    """
    Decode an audio file to mono float32, averaging channels if there are several.
    """
    path = Path(path)

    audio, sr = sf.read(path, always_2d=False, dtype="float32")

    if audio.ndim == 2:
        audio = audio.mean(axis=1)

    return audio.astype(np.float32), int(sr)



def save_audio(path: Union[str, Path], audio: np.ndarray, sr: int) -> None:

    path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    sf.write(path, audio, sr)



def load_mask(path: Union[str, Path]) -> np.ndarray:

    path = Path(path)

    mask = np.load(path, allow_pickle=False)

    if mask.ndim != 2:
        raise ValueError(f"Mask file {path} must hold a 2D (frames, bins) array, got shape {mask.shape}")

    return mask.astype(np.float32)



def save_mask(path: Union[str, Path], mask: np.ndarray) -> None:

    path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    np.save(path, np.asarray(mask, dtype=np.float32), allow_pickle=False)
