import os
import logging

from buffers.history import DEFAULT_MAX_HISTORY
from components.emotion_classifier import EmotionClassifier
from components.hormone_bank import HormoneBank
from components.reference_table import load_reference_table_or_default
from ops.telemetry import TelemetryManager
from systems.persistence import SessionPersistenceManager
from systems.simulation_clock import SimulationClock, UPDATE_INTERVAL
from utils.validate_config import load_and_validate_config

logger = logging.getLogger(__name__)


class ComponentFactory:
    def __init__(self, config=None, config_path="config.yaml", schema_path=None):
        logger.info("Initializing ComponentFactory")
        if config is None:
            if schema_path is None:
                config = load_and_validate_config(config_path)
            else:
                config = load_and_validate_config(config_path, schema_path)
        self.config = config

    def create_classifier(self):
        table_path = self.config.get('classifier', {}).get('reference_table')
        table = load_reference_table_or_default(table_path)
        classifier = EmotionClassifier(reference_table=table)
        logger.info("Emotion classifier ready with %d reference points.", len(table))
        return classifier

    def create_telemetry_manager(self):
        return TelemetryManager(self.config)

    def create_persistence_manager(self):
        persistence_cfg = self.config.get('persistence', {})
        if not persistence_cfg.get('enabled', True):
            return None
        log_dir = self.config.get('logging', {}).get('log_dir', 'logs')
        checkpoint_dir = os.path.join(log_dir, 'checkpoints')
        return SessionPersistenceManager(checkpoint_dir, retain_n=persistence_cfg.get('retain_n', 5))

    def create_clock(self, classifier=None, telemetry_manager=None, interval=UPDATE_INTERVAL):
        max_history = self.config.get('simulation', {}).get('max_history', DEFAULT_MAX_HISTORY)
        clock = SimulationClock(
            bank=HormoneBank(),
            classifier=classifier if classifier is not None else self.create_classifier(),
            max_history=max_history,
            interval=interval,
            telemetry_manager=telemetry_manager,
        )
        logger.info("Simulation clock ready (max_history=%d).", max_history)
        return clock

    def get_all_components(self):
        telemetry_manager = self.create_telemetry_manager()
        return {
            'config': self.config,
            'telemetry_manager': telemetry_manager,
            'persistence_manager': self.create_persistence_manager(),
            'clock': self.create_clock(telemetry_manager=telemetry_manager),
        }
