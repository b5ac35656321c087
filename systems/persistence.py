import os
import zlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

class SessionPersistenceManager:
    """
    Manages atomic checkpointing and integrity checks for simulation sessions.
    """
    def __init__(self, checkpoint_dir, retain_n=5):
        self.checkpoint_dir = str(checkpoint_dir)
        self.retain_n = retain_n
        Path(self.checkpoint_dir).mkdir(parents=True, exist_ok=True)

    def _get_checkpoint_path(self, seq):
        return os.path.join(self.checkpoint_dir, f"session_{seq}.json")

    def _get_manifest_path(self):
        return os.path.join(self.checkpoint_dir, "manifest.json")

    def _calculate_crc32(self, filepath):
        """Calculates the CRC32 checksum of a file."""
        with open(filepath, "rb") as f:
            return zlib.crc32(f.read())

    def save_checkpoint(self, state, step):
        """
        Atomically saves a checkpoint.

        Args:
            state (dict): The session state, as produced by ``SimulationClock.export_state``.
            step (int): The simulation time of the snapshot, stored with the entry.
                Checkpoints are ordered by save sequence, not by step.

        Returns:
            bool: True if the checkpoint was written.
        """
        tmp_path = None
        try:
            manifest = self._read_manifest()
            seq = max((int(k) for k in manifest), default=0) + 1
            path = self._get_checkpoint_path(seq)
            tmp_path = f"{path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(state, f)
            crc32 = self._calculate_crc32(tmp_path)
            os.replace(tmp_path, path)
            self._update_manifest(manifest, seq, step, path, crc32)
            self._cleanup_old_checkpoints()
            logger.info(f"Saved checkpoint #{seq} (step {step}) to {path}")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save checkpoint at step {step}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

    def _update_manifest(self, manifest, seq, step, path, crc32):
        manifest[str(seq)] = {
            "path": path,
            "step": step,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "crc32": crc32
        }
        self._write_manifest(manifest)

    def _write_manifest(self, manifest):
        # Newest first
        sorted_manifest = {k: manifest[k] for k in sorted(manifest.keys(), key=int, reverse=True)}
        with open(self._get_manifest_path(), "w") as f:
            json.dump(sorted_manifest, f, indent=4)

    def _read_manifest(self):
        manifest_path = self._get_manifest_path()
        if not os.path.exists(manifest_path):
            return {}
        with open(manifest_path, "r") as f:
            return json.load(f)

    def _cleanup_old_checkpoints(self):
        manifest = self._read_manifest()
        if len(manifest) <= self.retain_n:
            return

        seqs_to_remove = sorted(manifest.keys(), key=int)[:-self.retain_n]
        for seq in seqs_to_remove:
            path = manifest[seq]["path"]
            if os.path.exists(path):
                os.remove(path)
                logger.info(f"Removed old checkpoint: {path}")
            del manifest[seq]

        self._write_manifest(manifest)

    def load_latest_checkpoint(self, verify_integrity=True):
        """
        Loads the latest valid checkpoint.

        Args:
            verify_integrity (bool): If True, verifies the checksum before loading.

        Returns:
            The loaded state dict, or None if no valid checkpoint is found.
        """
        manifest = self._read_manifest()
        if not manifest:
            logger.warning("No checkpoints found.")
            return None

        latest_seq = max(manifest.keys(), key=int)
        checkpoint_info = manifest[latest_seq]
        path = checkpoint_info["path"]

        if not os.path.exists(path):
            logger.error(f"Checkpoint file not found: {path}.")
            return None

        if verify_integrity:
            crc32_expected = checkpoint_info.get("crc32")
            if crc32_expected is None:
                logger.warning(f"No CRC32 checksum found for checkpoint {path}. Loading without verification.")
            elif self._calculate_crc32(path) != crc32_expected:
                logger.error(f"Integrity check failed for {path}. Checksum mismatch. Aborting load.")
                return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                state = json.load(f)
            logger.info(f"Successfully loaded checkpoint from {path} at step {checkpoint_info.get('step')}.")
            return state
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load checkpoint from {path}: {e}")
            return None

    def has_checkpoints(self):
        return bool(self._read_manifest())
