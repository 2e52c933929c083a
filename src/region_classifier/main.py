# main.py
import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .config import Config
from .exceptions import RegionClassifierError
from .ml_engine import (
    DatasetBuilder,
    ModelTrainer,
    RegionClassifier,
    evaluate,
    load_model,
    read_dataset,
    write_report,
)
from .utils import measure_time, setup_logging


class RegionClassifierApp:
    """Main orchestrator for dataset generation, training, evaluation and inference"""

    def __init__(self, config=Config, log_file: Optional[str] = None):
        self.config = config
        self.logger = setup_logging(
            getattr(logging, config.LOG_LEVEL, logging.INFO), log_file
        )

    @measure_time
    def build_dataset(self, folder: str, documents: Optional[int] = None,
                      output: Optional[str] = None) -> Path:
        csv_path = DatasetBuilder(self.config).build(folder, documents, output)
        self.logger.info(f"Features written to {csv_path}")
        return csv_path

    @measure_time
    def train(self, training_folder: str, sigma: Optional[float] = None,
              n_jobs: Optional[int] = None):
        folder = Path(training_folder)
        inputs, labels = read_dataset(folder / self.config.FEATURES_FILENAME)
        model_path = folder / self.config.MODEL_FILENAME
        trainer = ModelTrainer(self.config, n_jobs=n_jobs)

        if sigma is None:
            self.logger.info("Training SVM model with cross-validation...")
            result = trainer.grid_search_train(inputs, labels, model_path)
        else:
            self.logger.info(f"Training SVM model with sigma={sigma}...")
            result = trainer.fixed_sigma_train(inputs, labels, sigma, model_path)

        self.logger.info(f"Model saved to {model_path} (sigma={result.sigma})")
        return result

    @measure_time
    def evaluate(self, training_folder: str, limit: int = 0):
        folder = Path(training_folder)
        model = load_model(folder / self.config.MODEL_FILENAME)
        inputs, labels = read_dataset(folder / self.config.FEATURES_FILENAME, limit)

        self.logger.info("Evaluating SVM model...")
        report = evaluate(model, inputs, labels)
        write_report(folder / self.config.REPORT_FILENAME, report)
        return report

    @measure_time
    def classify(self, model_path: str, pdf_path: str, output: Optional[str] = None) -> Dict:
        classifier = RegionClassifier.from_file(model_path)
        result = classifier.classify_pdf(pdf_path)

        if output:
            with open(output, 'w', encoding='utf-8') as f:
                json.dump(result, f, indent=2, ensure_ascii=False)
            self.logger.info(f"Classification written to {output}")
        return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='region-classifier',
        description='Classify PDF page regions with a Gaussian-kernel SVM',
    )
    parser.add_argument('--log-file', default=Config.LOG_FILE, help='Also log to this file')
    sub = parser.add_subparsers(dest='command', required=True)

    build = sub.add_parser('build-dataset', help='Generate features.csv from annotated PDFs')
    build.add_argument('folder')
    build.add_argument('--documents', type=int, default=None)
    build.add_argument('--output', default=None)

    train = sub.add_parser('train', help='Train a model from <folder>/features.csv')
    train.add_argument('folder')
    train.add_argument('--sigma', type=float, default=None,
                       help='Skip grid search and use this kernel width')
    train.add_argument('--jobs', type=int, default=None)

    ev = sub.add_parser('evaluate', help='Evaluate <folder>/model.gz on <folder>/features.csv')
    ev.add_argument('folder')
    ev.add_argument('--limit', type=int, default=0)

    classify = sub.add_parser('classify', help='Classify the text blocks of a PDF')
    classify.add_argument('model')
    classify.add_argument('pdf')
    classify.add_argument('--output', default=None)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    app = RegionClassifierApp(log_file=args.log_file)

    try:
        if args.command == 'build-dataset':
            app.build_dataset(args.folder, args.documents, args.output)
        elif args.command == 'train':
            app.train(args.folder, args.sigma, args.jobs)
        elif args.command == 'evaluate':
            report = app.evaluate(args.folder, args.limit)
            print(f"Model accuracy = {report.accuracy * 100:.3f}%")
        elif args.command == 'classify':
            result = app.classify(args.model, args.pdf, args.output)
            if not args.output:
                print(json.dumps(result, indent=2, ensure_ascii=False))
    except RegionClassifierError as e:
        app.logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
