"""공통 모듈: 설정, 에러, 로깅, 병렬 실행 유틸리티."""
