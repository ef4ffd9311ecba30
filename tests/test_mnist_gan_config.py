"""Tests for dl_labs/mnist_gan/utils.py and the mnist_gan entry point."""

import random
from unittest.mock import MagicMock

import numpy as np
import pytest

from dl_labs.mnist_gan import main as gan_main
from dl_labs.mnist_gan.utils import parse_arguments, setup_seed


class TestParseArguments:

    def test_defaults(self):
        """Defaults reproduce the original lab's setup."""
        config = parse_arguments([])

        assert config.batch_size == 128
        assert config.noise_dim == 100
        assert config.generator_layers == [256, 512, 1024]
        assert config.discriminator_layers == [1024, 512, 256]
        assert config.learning_rate == pytest.approx(0.0002)
        assert config.beta_1 == pytest.approx(0.5)
        assert config.discriminator_steps == 2
        assert config.visualization_interval == 10
        assert config.num_samples == 12
        assert config.seed == 42
        assert config.wandb_logging is False

    def test_custom_values(self):
        config = parse_arguments(["-b", "32", "--generator_layers", "64", "128", "-ds", "1", "-o", "out"])
        assert config.batch_size == 32
        assert config.generator_layers == [64, 128]
        assert config.discriminator_steps == 1
        assert config.output_dir == "out"

    def test_non_positive_interval_raises(self):
        with pytest.raises(ValueError, match="interval"):
            parse_arguments(["--log_interval", "0"])


class TestConfigGroups:

    def test_model_config_targets_mnist(self):
        model_config = parse_arguments([]).get_model_config()
        assert model_config["input_dim"] == 784
        assert model_config["noise_dim"] == 100

    def test_training_config(self):
        training_config = parse_arguments(["-e", "3"]).get_training_config()
        assert training_config["epochs"] == 3
        assert training_config["image_shape"] == (28, 28)
        assert training_config["output_dir"] is None

    def test_wandb_config(self):
        wandb_config = parse_arguments(["--wandb_logging", "-wn", "run"]).get_wandb_config()
        assert wandb_config == {"wandb_logging": True, "wandb_project": "MNIST-GAN", "wandb_name": "run",
                                "wandb_mode": "offline"}


class TestSetupSeed:

    def test_same_seed_same_numbers(self):
        setup_seed(3)
        first = (random.random(), np.random.rand())
        setup_seed(3)
        assert (random.random(), np.random.rand()) == first

    def test_none_leaves_generators_alone(self):
        setup_seed(None)


class TestRun:

    def test_run_trains_and_saves(self, monkeypatch, real_features, tmp_path):
        """The entry point wires data, model, training loop and saving together."""
        gan = MagicMock()
        monkeypatch.setattr(gan_main, "load_mnist_features", lambda train=True: real_features)
        monkeypatch.setattr(gan_main, "DenseGAN", MagicMock(return_value=gan))
        train_gan = MagicMock()
        monkeypatch.setattr(gan_main, "train_gan", train_gan)

        result = gan_main.run(["-e", "1", "-b", "8", "-s", str(tmp_path / "gen.keras")])

        assert result is gan
        gan_main.DenseGAN.assert_called_once()
        assert gan_main.DenseGAN.call_args.kwargs["input_dim"] == 784
        iterator = train_gan.call_args.args[1]
        assert len(iterator) == 3
        gan.save_generator.assert_called_once_with(str(tmp_path / "gen.keras"))
