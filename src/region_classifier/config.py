# config.py
class Config:
    # Row caps (memory/runtime bound for the SVM solver)
    MAX_CROSS_VALIDATE_ROWS = 5_000
    MAX_TRAINING_ROWS = 40_000

    # Grid search
    CV_FOLDS = 10
    RANDOM_SEED = 0
    SIGMA_MIN = 0.00000001
    SIGMA_MAX = 3.0  # exclusive
    SIGMA_STEP = 0.25
    SVM_C = 1.0
    N_JOBS = -1  # all cores

    # Features
    FEATURE_PRECISION = 5

    # Dataset generation
    SAMPLING_SEED = 42

    # File names
    FEATURES_FILENAME = 'features.csv'
    MODEL_FILENAME = 'model.gz'
    REPORT_FILENAME = 'evaluation.txt'
    MODEL_COMPRESSION = ('gzip', 3)

    # Debug settings
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'region_classifier.log'
