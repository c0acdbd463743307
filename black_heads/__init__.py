"""Black-head segmentation library.

This package retrieves black note-head candidates from the spots of a
binarized music sheet. Spots are connected ink regions, described as
columns of vertical pixel runs grouped into sections.

The processing of each system consists of:
1. Selection of spots that may contain black heads
2. Reconstruction of head-scale spots by morphological closing
3. Splitting of spots that hold several heads (direct or watershed)
4. Validation of each single-head spot on shape and pitch grades

Example:
    Basic usage through the pipeline API:

    >>> from black_heads.pipeline import build_sheet_heads, dispatch_spots, retrieve_page_spots
    >>> from black_heads.classifier import TemplateClassifier
    >>> from black_heads.models import Scale
    >>> from black_heads.sheet import Sheet
    >>>
    >>> # Load image, declare staves, and build the heads
    >>> image = cv2.imread("sheet.png", cv2.IMREAD_GRAYSCALE)
    >>> sheet = Sheet(Scale(interline=20))
    >>> sheet.add_system(staves)
    >>> dispatch_spots(sheet, retrieve_page_spots(image, 128, sheet))
    >>> result = build_sheet_heads(sheet, classifier)
"""
