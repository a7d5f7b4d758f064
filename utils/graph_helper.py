from typing import List, Sequence
import pyqtgraph as pg


def _base_plot(plot_widget: pg.PlotWidget):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.15)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.setClipToView(True)
    plot_widget.getAxis('left').setStyle(tickLength=-5)


def setup_floor_plot(plot_widget: pg.PlotWidget, line_color: str):
    """Per-floor WPM line; x axis is the floor number starting at 1."""
    _base_plot(plot_widget)
    plot_widget.setLabel('left', 'WPM')
    plot_widget.setLabel('bottom', 'Floor')
    curve = plot_widget.plot([], [], pen=pg.mkPen(line_color, width=2.5),
                             symbol='o', symbolSize=6, antialias=True)
    return curve


def update_curve(curve, y: List[float]):
    x = list(range(1, len(y) + 1))
    curve.setData(x, y)


def setup_bar_plot(plot_widget: pg.PlotWidget, label: str):
    _base_plot(plot_widget)
    plot_widget.setLabel('left', label)
    bar = pg.BarGraphItem(x=[], height=[], width=0.8)
    plot_widget.addItem(bar)
    return bar


def update_bars(plot_widget: pg.PlotWidget, bar, labels: Sequence[str], values: Sequence[float]):
    x = list(range(len(values)))
    bar.setOpts(x=x, height=list(values), width=0.8)
    plot_widget.getAxis('bottom').setTicks([[(i, lab) for i, lab in enumerate(labels)]])
