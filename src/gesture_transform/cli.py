"""gesture-transform CLI.

Usage:
    gesture-transform config       — Print or write the engine configuration
    gesture-transform replay       — Feed a recorded landmark session through the engine
    gesture-transform record       — Record a landmark session from the camera
    gesture-transform live         — Run the engine on the camera and print its output
    gesture-transform benchmark    — Measure engine throughput on synthetic frames
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="gesture-transform",
    help="🤚 Hand-gesture manipulation engine for 3D viewers.",
    add_completion=False,
)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level (debug, info, warning, error)"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(path: Optional[str], two_hand: Optional[bool], lock_center: Optional[bool]):
    from gesture_transform.config import EngineConfig

    if path:
        if not Path(path).exists():
            typer.echo(f"❌ Config not found: {path}", err=True)
            raise typer.Exit(1)
        try:
            config = EngineConfig.from_yaml(path)
        except ValueError as e:
            typer.echo(f"❌ Invalid config: {e}", err=True)
            raise typer.Exit(1)
    else:
        config = EngineConfig()

    if two_hand is not None:
        config.two_hand.enabled = two_hand
    if lock_center is not None:
        config.lock_center = lock_center
    return config


def _describe(engine) -> str:
    t = engine.transform
    return (
        f"scale={t.scale:.3f} rot=({t.rotation_x:+.2f}, {t.rotation_y:+.2f}) "
        f"pos=({t.position_x:+.2f}, {t.position_y:+.2f}) cam={engine.camera.distance:.3f}"
    )


@app.command()
def config(
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Write YAML to this path"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Start from an existing config"),
):
    """Print the effective engine configuration as YAML."""
    import yaml

    cfg = _load_config(config_path, None, None)
    if output:
        cfg.to_yaml(output)
        typer.echo(f"💾 Saved to: {output}")
    else:
        typer.echo(yaml.dump(cfg.to_dict(), default_flow_style=False, sort_keys=False))


@app.command()
def replay(
    session: str = typer.Argument(..., help="Path to a recorded landmark session"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Engine config YAML"),
    two_hand: Optional[bool] = typer.Option(None, "--two-hand/--no-two-hand", help="Two-hand mode"),
    lock_center: Optional[bool] = typer.Option(None, "--lock-center/--no-lock-center", help="Lock center"),
    realtime: bool = typer.Option(False, help="Play at recorded timing"),
    speed: float = typer.Option(1.0, min=0.01, help="Playback speed multiplier"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary"),
    metrics: bool = typer.Option(False, help="Print Prometheus metrics after replay"),
):
    """Replay a landmark session through the engine."""
    from gesture_transform.engine import GestureEngine
    from gesture_transform.metrics import MetricsCollector
    from gesture_transform.recorder import SessionPlayer
    from gesture_transform.state import TransitionType

    path = Path(session)
    if not path.exists():
        typer.echo(f"❌ Session not found: {session}", err=True)
        raise typer.Exit(1)

    try:
        player = SessionPlayer.load(path)
    except (ValueError, KeyError) as e:
        typer.echo(f"❌ Could not read session: {e}", err=True)
        raise typer.Exit(1)

    collector = MetricsCollector()
    engine = GestureEngine(_load_config(config_path, two_hand, lock_center), metrics=collector)
    typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")

    if not quiet:
        def on_transition(event):
            if event.type is not TransitionType.CONTINUES:
                typer.echo(f"   {event.timestamp:7.3f}s {event.type.value:8s} {event.label}")

        engine.on_transition(on_transition)

    frames = player.play_realtime(speed=speed) if realtime else player.play()
    for frame in frames:
        engine.process(frame.hands, timestamp=frame.timestamp)
        engine.tick()

    typer.echo(f"\n✅ Replay complete. Final gesture: {engine.label}")
    typer.echo(f"   {_describe(engine)}")
    entries = collector.gesture_entries
    if entries:
        typer.echo("   Entries: " + ", ".join(f"{k}={v}" for k, v in sorted(entries.items())))
    if metrics:
        typer.echo("")
        typer.echo(collector.render())


@app.command()
def record(
    output: str = typer.Option("session.json", "-o", help="Output file path"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    camera: int = typer.Option(0, help="Camera device index"),
):
    """Record a landmark session from the camera."""
    import cv2
    from gesture_transform.detector import HandDetector
    from gesture_transform.recorder import SessionRecorder

    cap = cv2.VideoCapture(camera)
    if not cap.isOpened():
        typer.echo(f"❌ Could not open camera {camera}", err=True)
        raise typer.Exit(1)

    detector = HandDetector()
    recorder = SessionRecorder()

    typer.echo(f"🎥 Recording from camera {camera}... press Ctrl+C to stop")
    recorder.start()
    start = time.monotonic()

    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                continue
            hands = detector.detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            recorder.add_frame(hands)

            if recorder.frame_count % 30 == 0:
                typer.echo(
                    f"\r   Frames: {recorder.frame_count} | Hands: {len(hands)}", nl=False
                )
            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()
        cap.release()
        detector.close()

    recorder.save(output)
    typer.echo(f"\n📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s) to {output}")


@app.command()
def live(
    camera: int = typer.Option(0, help="Camera device index"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Engine config YAML"),
    two_hand: Optional[bool] = typer.Option(None, "--two-hand/--no-two-hand", help="Two-hand mode"),
    lock_center: Optional[bool] = typer.Option(None, "--lock-center/--no-lock-center", help="Lock center"),
    every: int = typer.Option(10, help="Print status every N frames"),
):
    """Run the engine on the camera and print gesture and target transform."""
    import cv2
    from gesture_transform.detector import HandDetector
    from gesture_transform.engine import GestureEngine

    cap = cv2.VideoCapture(camera)
    if not cap.isOpened():
        typer.echo(f"❌ Could not open camera {camera}", err=True)
        raise typer.Exit(1)

    engine = GestureEngine(_load_config(config_path, two_hand, lock_center))
    detector = HandDetector()
    frame_count = 0

    typer.echo("🎥 Running engine, press Ctrl+C to stop")
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                continue
            engine.process(detector.detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)))
            engine.tick()
            frame_count += 1
            if frame_count % every == 0:
                typer.echo(f"\r   {engine.label:32s} {_describe(engine)}", nl=False)
    except KeyboardInterrupt:
        pass
    finally:
        cap.release()
        detector.close()
    typer.echo("")


@app.command()
def benchmark(
    iterations: int = typer.Option(2000, help="Number of frames"),
):
    """Measure per-frame engine latency on a synthetic gesture cycle."""
    from gesture_transform import synthetic
    from gesture_transform.engine import GestureEngine
    from gesture_transform.metrics import MetricsCollector

    poses = [
        synthetic.make_fist(),
        synthetic.make_two_fingers(),
        synthetic.make_one_finger(),
        synthetic.make_three_fingers(),
        synthetic.make_pinch(0.03),
        synthetic.make_open_palm(),
        synthetic.make_rotate(),
    ]
    collector = MetricsCollector()
    engine = GestureEngine(metrics=collector)

    typer.echo(f"⚡ Running benchmark: {iterations} frames")
    times = []
    for i in range(iterations):
        pose = poses[(i // 10) % len(poses)]
        t0 = time.perf_counter()
        engine.process([pose], timestamp=i / 30.0)
        times.append(time.perf_counter() - t0)

    times.sort()
    avg_ms = sum(times) / len(times) * 1000
    p95_ms = times[int(len(times) * 0.95)] * 1000
    typer.echo(f"\n📊 Results:")
    typer.echo(f"   Average latency: {avg_ms:.3f} ms")
    typer.echo(f"   P95 latency:     {p95_ms:.3f} ms")
    typer.echo(f"   Throughput:      {1000 / avg_ms if avg_ms > 0 else 0:.0f} FPS")
    typer.echo(f"   Entries:         {collector.gesture_entries}")


def main():
    app()


if __name__ == "__main__":
    main()
