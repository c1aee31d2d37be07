"""Chain of signal transforms applied between encode and decode."""


class SignalPipeline:
    """An ordered list of transforms applied to a composite signal.

    Each transform is a callable: fn(signal_array, sample_rate) -> signal_array
    """

    def __init__(self, transforms=None):
        self.transforms = list(transforms or [])

    def add(self, transform_fn):
        """Append a transform; returns the pipeline so calls can be chained."""
        self.transforms.append(transform_fn)
        return self

    def process(self, signal, sample_rate):
        """Apply all transforms in order.

        Args:
            signal: 1D composite signal.
            sample_rate: Sample rate of the signal in Hz, which depends on
                the standard and the width it was encoded at.

        Returns:
            Transformed signal array.
        """
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        for fn in self.transforms:
            signal = fn(signal, sample_rate)
        return signal

    def clear(self):
        self.transforms.clear()

    def __len__(self):
        return len(self.transforms)
