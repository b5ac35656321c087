from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from components.hormone_bank import HORMONE_NAMES


class TelemetryManager:
    """
    Manages and exposes simulation metrics for Prometheus.
    """
    def __init__(self, config):
        """
        Initializes the TelemetryManager and defines Prometheus metrics.

        Each manager owns its own registry so several simulations can run in
        one process.
        """
        self.config = config.get('telemetry', {})
        self.enabled = self.config.get('enabled', False)
        if not self.enabled:
            return

        self.port = self.config.get('port', 8000)
        self.registry = CollectorRegistry()

        # --- Define Prometheus Metrics ---

        # Gauges (value can go up or down)
        self.arousal_gauge = Gauge('hormone_sim_arousal', 'Arousal of the latest history record.', registry=self.registry)
        self.valence_gauge = Gauge('hormone_sim_valence', 'Valence of the latest history record.', registry=self.registry)
        self.dominance_gauge = Gauge('hormone_sim_dominance', 'Dominance of the latest history record.', registry=self.registry)
        self.hormone_level_gauge = Gauge('hormone_sim_hormone_level', 'Current hormone level.', ['hormone'], registry=self.registry)

        # Counters (value only goes up)
        self.ticks_counter = Counter('hormone_sim_ticks_total', 'Total number of decay ticks applied.', registry=self.registry)
        self.injections_counter = Counter('hormone_sim_injections_total', 'Total number of hormone injections.', ['hormone'], registry=self.registry)

    def start_server(self):
        """
        Starts the Prometheus HTTP server in a background thread.
        """
        if not self.enabled:
            return
        start_http_server(self.port, registry=self.registry)
        print(f"📈 Prometheus metrics server started on port {self.port}")

    def update_on_record(self, record):
        """
        Updates gauges from a freshly appended history record.
        """
        if not self.enabled:
            return

        self.arousal_gauge.set(record.arousal)
        self.valence_gauge.set(record.valence)
        self.dominance_gauge.set(record.dominance)
        for name in HORMONE_NAMES:
            self.hormone_level_gauge.labels(hormone=name.value).set(getattr(record, name.value))

    def update_on_tick(self):
        if not self.enabled:
            return
        self.ticks_counter.inc()

    def update_on_inject(self, hormone):
        if not self.enabled:
            return
        self.injections_counter.labels(hormone=hormone).inc()
